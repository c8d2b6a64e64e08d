"""Greeting endpoints."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import SessionPrincipal, get_async_session, get_current_principal
from models.greeting import Greeting
from schemas.greeting import (
    GreetingCreate,
    GreetingResponse,
    GreetingText,
    GreetingUpdate,
    NameRequest,
)
from services import greeting_service
from services.exceptions import GreetingNotFoundError

router = APIRouter(prefix="/greetings", tags=["greetings"])


@router.get("/hello", response_model=GreetingText)
async def hello() -> GreetingText:
    """Default greeting. No authentication required."""
    return GreetingText(greeting=greeting_service.personalized_greeting())


@router.post("/personalized", response_model=GreetingText)
async def personalized(data: NameRequest) -> GreetingText:
    """Greeting built from an optional first and last name."""
    return GreetingText(
        greeting=greeting_service.personalized_greeting(data.first_name, data.last_name),
    )


@router.post("/", response_model=GreetingResponse, status_code=201)
async def create_greeting(
    data: GreetingCreate,
    principal: SessionPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_async_session),
) -> Greeting:
    """Save a greeting for the current user."""
    return await greeting_service.create_greeting(db, principal.user_id, data)


@router.get("/", response_model=list[GreetingResponse])
async def list_greetings(
    principal: SessionPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_async_session),
) -> list[Greeting]:
    """List the current user's greetings."""
    return await greeting_service.list_greetings(db, principal.user_id)


@router.get("/{greeting_id}", response_model=GreetingResponse)
async def get_greeting(
    greeting_id: int,
    principal: SessionPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_async_session),
) -> Greeting:
    """Get one of the current user's greetings."""
    greeting = await greeting_service.get_greeting(db, principal.user_id, greeting_id)
    if greeting is None:
        raise HTTPException(status_code=404, detail="Greeting not found")
    return greeting


@router.patch("/{greeting_id}", response_model=GreetingResponse)
async def update_greeting(
    greeting_id: int,
    data: GreetingUpdate,
    principal: SessionPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_async_session),
) -> Greeting:
    """Edit the message of one of the current user's greetings."""
    try:
        return await greeting_service.update_greeting(db, principal.user_id, greeting_id, data)
    except GreetingNotFoundError:
        raise HTTPException(status_code=404, detail="Greeting not found") from None


@router.delete("/{greeting_id}", status_code=204)
async def delete_greeting(
    greeting_id: int,
    principal: SessionPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_async_session),
) -> None:
    """Delete one of the current user's greetings."""
    deleted = await greeting_service.delete_greeting(db, principal.user_id, greeting_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Greeting not found")
