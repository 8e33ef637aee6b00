"""User domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...constants import Role
from ...shared.validators import validate_e164_phone, validate_gstin, validate_indian_phone


class ProfileUpsert(BaseModel):
    """Schema for completing the caller's own profile after signup"""

    name: str = Field(..., min_length=2)
    phone: Optional[str] = None
    companyName: Optional[str] = None
    address: Optional[str] = None
    gstNumber: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        if v:
            return validate_e164_phone(v)
        return v

    @field_validator("gstNumber")
    @classmethod
    def validate_gst(cls, v):
        if v:
            return validate_gstin(v)
        return v


class RoleUpdate(BaseModel):
    role: Role


class ClientCreate(BaseModel):
    """Schema for sales creating a client account"""

    id: Optional[str] = Field(None, description="Firebase uid when the account already exists")
    name: str = Field(..., min_length=2)
    phone: str
    companyName: str = Field(..., min_length=2)
    gstNumber: Optional[str] = None
    address: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return validate_indian_phone(v)

    @field_validator("gstNumber")
    @classmethod
    def validate_gst(cls, v):
        if v:
            return validate_gstin(v)
        return v


class UserResponse(BaseModel):
    id: str
    name: str
    phone: Optional[str] = None
    role: str
    companyName: Optional[str] = None
    address: Optional[str] = None
    gstNumber: Optional[str] = None
    created_at: Optional[datetime] = None
