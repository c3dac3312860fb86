"""
Authentication Pydantic schemas.

Defines request and response schemas for admin authentication.
"""

from pydantic import BaseModel, Field


class AdminLogin(BaseModel):
    """
    Schema for admin login.

    Used by POST /admin/login endpoint.
    """
    username: str = Field(..., min_length=1, description="Admin username")
    password: str = Field(..., min_length=1, description="Password")


class TokenResponse(BaseModel):
    """
    Schema for JWT token response.

    Returned by a successful admin login.
    """
    success: bool = Field(default=True)
    message: str = Field(default="Authentication successful")
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    username: str = Field(..., description="Admin username")


class AdminResponse(BaseModel):
    """
    Schema for admin identity response.

    Used by GET /admin/me endpoint.
    """
    username: str
    role: str
