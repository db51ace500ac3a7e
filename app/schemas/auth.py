"""
app/schemas/auth.py

Purpose: Sign-up / sign-in payloads
"""

from pydantic import BaseModel, Field
from typing import Optional

from app.schemas.user import UserProfile


class RegisterRequest(BaseModel):
    email: str = Field(..., description="Login e-mail")
    password: str = Field(..., min_length=6)
    name: Optional[str] = Field(None, max_length=100)

    class Config:
        json_schema_extra = {
            "example": {
                "email": "an.nguyen@example.com",
                "password": "matkhau123",
                "name": "Nguyễn Văn An"
            }
        }


class LoginRequest(BaseModel):
    email: str
    password: str


class GoogleLoginRequest(BaseModel):
    credential: str = Field(..., description="Google ID token from One-Tap / Sign-In")


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserProfile
