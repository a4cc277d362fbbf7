"""Pydantic request/response schemas for the Identity API."""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

# --- Request Schemas ---


class RegisterRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "email": "lan.nguyen@example.com",
                    "name": "Nguyễn Thị Lan",
                    "password": "matkhau123",
                    "phone": "0901234567",
                }
            ]
        }
    }

    email: str = Field(..., max_length=254)
    name: str = Field(..., min_length=1, max_length=150)
    password: str = Field(..., min_length=6, max_length=128)
    phone: str | None = Field(None, max_length=20)


class LoginRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"email": "lan.nguyen@example.com", "password": "matkhau123"}]}}

    email: str | None = Field(None, max_length=254)
    phone: str | None = Field(None, max_length=20)
    password: str = Field(..., max_length=128)

    @model_validator(mode="after")
    def one_handle(self):
        if bool(self.email) == bool(self.phone):
            raise ValueError("Provide either email or phone")
        return self


class UpdateProfileRequest(BaseModel):
    name: str | None = Field(None, max_length=150)
    phone: str | None = Field(None, max_length=20)
    email: str | None = Field(None, max_length=254)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., max_length=128)
    new_password: str = Field(..., min_length=6, max_length=128)


class ForgotPasswordRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"email": "lan.nguyen@example.com"}]}}

    email: str = Field(..., max_length=254)


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1, max_length=128)
    new_password: str = Field(..., min_length=6, max_length=128)


# --- Response Schemas ---


class UserResponse(BaseModel):
    id: str
    email: str
    name: str
    phone: str = ""
    role: str
    created_at: str | None = None


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class UserIdResponse(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"user_id": "abc-123"}]}}

    user_id: str


class MessageResponse(BaseModel):
    message: str


class StatusResponse(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"status": "ok"}]}}

    status: str = "ok"
