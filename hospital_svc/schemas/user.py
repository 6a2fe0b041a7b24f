"""
Pydantic schemas for user accounts.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.user import Role


class UserCreate(BaseModel):
    """Schema for creating a user account (admin only)."""
    name: str = Field(..., min_length=1, max_length=200, examples=["Asha Perera"])
    email: str = Field(
        ...,
        max_length=254,
        pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$",
        description="Unique login email",
        examples=["asha.perera@hospital.lk"],
    )
    role: Role = Field(..., description="Role gating which operations the user may call")
    mobile_number: Optional[str] = Field(None, max_length=20, examples=["+94771234567"])


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    role: Role
    mobile_number: Optional[str] = None
    is_active: bool = True
    created_at: str
    updated_at: str

    model_config = ConfigDict(from_attributes=True)


class UserEnvelope(BaseModel):
    user: UserResponse
    message: Optional[str] = None


class UserListEnvelope(BaseModel):
    users: List[UserResponse]
