"""Account endpoints: registration, login and password reset."""
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from api.dependencies import SessionPrincipal, get_credential_service, get_current_principal
from schemas.user import (
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    OperationResponse,
    RegisterRequest,
    ResetPasswordRequest,
    UserProfile,
)
from services.credential_service import CredentialService
from services.exceptions import (
    CredentialError,
    DependencyFailureError,
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidOrExpiredTokenError,
    NotFoundError,
    RegistrationFailedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


def _to_http(exc: CredentialError) -> HTTPException:
    """Map a credential failure to its fixed status code and message."""
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=422, detail=str(exc))
    if isinstance(exc, DuplicateEmailError):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, RegistrationFailedError):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, InvalidCredentialsError):
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
            headers={"WWW-Authenticate": "Bearer"},
        )
    if isinstance(exc, InvalidOrExpiredTokenError):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, DependencyFailureError):
        return HTTPException(status_code=503, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))


@router.post("/register", response_model=UserProfile, status_code=201)
async def register(
    data: RegisterRequest,
    service: CredentialService = Depends(get_credential_service),
) -> UserProfile:
    """Register a new account. Returns the public profile (no password material)."""
    try:
        return await service.register(
            data.first_name, data.last_name, data.email, data.password,
        )
    except CredentialError as e:
        logger.info("register_rejected reason=%s", e.reason)
        raise _to_http(e) from None


@router.post("/login", response_model=LoginResponse)
async def login(
    data: LoginRequest,
    service: CredentialService = Depends(get_credential_service),
) -> LoginResponse:
    """
    Exchange email and password for a bearer session token.

    Unknown emails and wrong passwords get the same 401 response.
    """
    try:
        token = await service.login(data.email, data.password)
    except CredentialError as e:
        raise _to_http(e) from None
    return LoginResponse(access_token=token)


@router.post("/forgot-password", response_model=OperationResponse)
async def forgot_password(
    data: ForgotPasswordRequest,
    service: CredentialService = Depends(get_credential_service),
) -> OperationResponse:
    """
    Email a single-use password reset link.

    Returns 404 for unknown emails and 502 when the mail server refuses the message.
    """
    try:
        sent = await service.forgot_password(data.email)
    except CredentialError as e:
        raise _to_http(e) from None
    if not sent:
        raise HTTPException(status_code=502, detail="Password reset email could not be sent")
    return OperationResponse(success=True, message="Password reset email sent")


@router.post("/reset-password", response_model=OperationResponse)
async def reset_password(
    data: ResetPasswordRequest,
    token: str = Query(..., min_length=1),
    service: CredentialService = Depends(get_credential_service),
) -> OperationResponse:
    """Set a new password using the token from the reset email. Each token works once."""
    try:
        await service.reset_password(token, data.new_password)
    except CredentialError as e:
        raise _to_http(e) from None
    return OperationResponse(success=True, message="Password reset successfully")


@router.get("/me", response_model=UserProfile)
async def get_me(
    principal: SessionPrincipal = Depends(get_current_principal),
    service: CredentialService = Depends(get_credential_service),
) -> UserProfile:
    """Get the current authenticated user's profile."""
    try:
        return await service.get_profile(principal.email)
    except CredentialError as e:
        raise _to_http(e) from None
