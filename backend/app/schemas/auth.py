from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class UserLogin(BaseModel):
    username: str = Field(..., min_length=1, description="Username is required")
    password: str = Field(..., min_length=1, description="Password is required")


class UserResponse(BaseModel):
    """Public view of a user; never carries the password hash"""
    id: str
    username: str
    first_name: Optional[str] = Field(None, serialization_alias="firstName")
    last_name: Optional[str] = Field(None, serialization_alias="lastName")

    model_config = ConfigDict(from_attributes=True)


class LoginResponse(BaseModel):
    message: str = "Login successful"
    user: UserResponse


class MessageResponse(BaseModel):
    message: str
