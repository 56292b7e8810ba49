"""
ClientHub Backend - Authentication Schemas
===========================================

What:  Request/response contracts for login, logout and password change.
How:   Request fields are Optional so that absent values reach the service,
       which reports them as a 400 "missing fields" error instead of FastAPI's 422.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class LoginResponse(BaseModel):
    message: str = Field(default="Login successful")
    token: str = Field(description="Bearer token for the Authorization header")
    username: str


class LogoutRequest(BaseModel):
    username: Optional[str] = None


class ChangePasswordRequest(BaseModel):
    """The admin UI sends camelCase keys; snake_case is accepted as well."""

    model_config = ConfigDict(populate_by_name=True)

    current_password: Optional[str] = Field(default=None, alias="currentPassword")
    new_password: Optional[str] = Field(default=None, alias="newPassword")
