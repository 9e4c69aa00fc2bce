"""
Auth Router - signup, signin and password reset endpoints.
"""
import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Header, Request, status
from sqlalchemy.orm import Session

from ..auth import PasswordHasher, TokenIssuer
from ..db import get_db
from ..errors import AuthServiceError, InternalError, Unauthorized
from ..schemas import (
    ForgotPasswordRequest,
    MessageResponse,
    PublicUser,
    ResetPasswordRequest,
    SigninRequest,
    SigninResponse,
    SignupRequest,
    SignupResponse,
)
from ..service import AuthService
from ..store import UserStore

router = APIRouter(prefix="/api/auth", tags=["auth"])
logger = logging.getLogger(__name__)


def get_auth_service(request: Request, db: Session = Depends(get_db)) -> AuthService:
    state = request.app.state
    hasher: PasswordHasher = state.hasher
    tokens: TokenIssuer = state.tokens
    return AuthService(
        store=UserStore(db),
        hasher=hasher,
        tokens=tokens,
        mailer=state.mailer,
        frontend_url=state.settings.FRONTEND_URL,
    )


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
def signup(payload: SignupRequest, service: AuthService = Depends(get_auth_service)):
    try:
        user_id = service.signup(payload.email, payload.password, payload.name)
    except AuthServiceError:
        raise
    except Exception as e:
        logger.exception("Signup error")
        raise InternalError("Server error during signup") from e
    return SignupResponse(message="User created successfully", userId=user_id)


@router.post("/signin", response_model=SigninResponse)
def signin(payload: SigninRequest, service: AuthService = Depends(get_auth_service)):
    try:
        result = service.signin(payload.email, payload.password)
    except AuthServiceError:
        raise
    except Exception as e:
        logger.exception("Signin error")
        raise InternalError("Server error during login") from e
    return SigninResponse(message="Login successful", token=result["token"], user=result["user"])


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(
    payload: ForgotPasswordRequest,
    background_tasks: BackgroundTasks,
    service: AuthService = Depends(get_auth_service),
):
    try:
        message = service.forgot_password(payload.email, schedule=background_tasks.add_task)
    except AuthServiceError:
        raise
    except Exception as e:
        logger.exception("Forgot password error")
        raise InternalError("Internal server error") from e
    return MessageResponse(message=message)


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(payload: ResetPasswordRequest, service: AuthService = Depends(get_auth_service)):
    try:
        message = service.reset_password(payload.token, payload.new_password)
    except AuthServiceError:
        raise
    except Exception as e:
        logger.exception("Reset password error")
        raise InternalError("Internal server error") from e
    return MessageResponse(message=message)


@router.get("/me", response_model=PublicUser)
def me(
    service: AuthService = Depends(get_auth_service),
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
):
    if not authorization or not authorization.lower().startswith("bearer "):
        raise Unauthorized("Not authenticated")
    token = authorization.split(" ", 1)[1].strip()
    return service.current_user(token)
