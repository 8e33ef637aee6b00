"""Staff domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...constants import STAFF_ROLES, Role, StaffType
from ...shared.validators import validate_e164_phone


def _validate_staff_role(v):
    if v is not None and v not in STAFF_ROLES:
        raise ValueError("Clients cannot be registered as staff")
    return v


class StaffCreate(BaseModel):
    name: str = Field(..., min_length=2)
    phone: str
    role: Role
    staffType: StaffType = StaffType.INDIVIDUAL
    userId: Optional[str] = None
    address: Optional[str] = None
    idNumber: Optional[str] = None
    bankAccountNumber: Optional[str] = None
    bankIfscCode: Optional[str] = None
    perEventCharge: Optional[float] = Field(None, ge=0)
    monthlySalary: Optional[float] = Field(None, ge=0)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return validate_e164_phone(v)

    @field_validator("role")
    @classmethod
    def validate_role(cls, v):
        return _validate_staff_role(v)


class StaffUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2)
    phone: Optional[str] = None
    role: Optional[Role] = None
    staffType: Optional[StaffType] = None
    userId: Optional[str] = None
    address: Optional[str] = None
    idNumber: Optional[str] = None
    bankAccountNumber: Optional[str] = None
    bankIfscCode: Optional[str] = None
    perEventCharge: Optional[float] = Field(None, ge=0)
    monthlySalary: Optional[float] = Field(None, ge=0)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        if v:
            return validate_e164_phone(v)
        return v

    @field_validator("role")
    @classmethod
    def validate_role(cls, v):
        return _validate_staff_role(v)


class StaffResponse(BaseModel):
    id: str
    name: str
    phone: str
    role: str
    staffType: str
    userId: Optional[str] = None
    address: Optional[str] = None
    idNumber: Optional[str] = None
    bankAccountNumber: Optional[str] = None
    bankIfscCode: Optional[str] = None
    perEventCharge: Optional[float] = None
    monthlySalary: Optional[float] = None
    created_at: Optional[datetime] = None
