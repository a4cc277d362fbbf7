"""FastAPI endpoints for the Identity domain — registration, login, profile and password recovery."""

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from identity.api.schemas import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    ResetPasswordRequest,
    StatusResponse,
    TokenResponse,
    UpdateProfileRequest,
    UserIdResponse,
    UserResponse,
)
from identity.auth.dependencies import current_user
from identity.auth.tokens import TokenClaims
from identity.user.authentication import AuthenticateUser
from identity.user.profile import ChangePassword, UpdateProfile
from identity.user.recovery import RequestPasswordReset, ResetPassword
from identity.user.registration import RegisterUser
from identity.user.user import User

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=201, response_model=UserIdResponse)
async def register(body: RegisterRequest) -> UserIdResponse:
    command = RegisterUser(
        email=body.email,
        name=body.name,
        password=body.password,
        phone=body.phone,
    )
    result = current_domain.process(command, asynchronous=False)
    return UserIdResponse(user_id=result)


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest) -> TokenResponse:
    command = AuthenticateUser(email=body.email, phone=body.phone, password=body.password)
    try:
        result = current_domain.process(command, asynchronous=False)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=exc.messages) from None
    return TokenResponse(**result)


@router.get("/me", response_model=UserResponse)
async def me(user: TokenClaims = Depends(current_user)) -> UserResponse:
    account = current_domain.repository_for(User).get(user.user_id)
    return UserResponse(**account.to_public())


@router.put("/profile", response_model=StatusResponse)
async def update_profile(body: UpdateProfileRequest, user: TokenClaims = Depends(current_user)) -> StatusResponse:
    command = UpdateProfile(user_id=user.user_id, name=body.name, phone=body.phone, email=body.email)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@router.put("/password", response_model=StatusResponse)
async def change_password(body: ChangePasswordRequest, user: TokenClaims = Depends(current_user)) -> StatusResponse:
    command = ChangePassword(
        user_id=user.user_id,
        current_password=body.current_password,
        new_password=body.new_password,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(body: ForgotPasswordRequest) -> MessageResponse:
    # Mail delivery can block on the SMTP relay
    message = await run_in_threadpool(
        current_domain.process, RequestPasswordReset(email=body.email), asynchronous=False
    )
    return MessageResponse(message=message)


@router.post("/reset-password", response_model=StatusResponse)
async def reset_password(body: ResetPasswordRequest) -> StatusResponse:
    command = ResetPassword(token=body.token, new_password=body.new_password)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()
