# backend/auth/schemas.py

from pydantic import BaseModel, EmailStr, Field


class RegisterSchema(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8, description="At least 8 characters")
    currency: str = Field("USD", pattern=r"^[A-Z]{3}$", description="ISO 4217 display currency")


class LoginSchema(BaseModel):
    email: EmailStr
    password: str
