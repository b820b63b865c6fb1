"""
Client Pydantic schemas.
"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from nubestock.schemas.base import AuditedRead


def _blank_to_none(value):
    # Forms send "" for unset optional fields
    if isinstance(value, str) and not value.strip():
        return None
    return value


class ClientCreate(BaseModel):
    """Schema for creating a client (also one record of a bulk upload)."""

    client_name: str = Field(..., min_length=2, max_length=200)
    business_name: Optional[str] = Field(default=None, min_length=2, max_length=200)
    ruc_cedula: str = Field(..., min_length=10, max_length=13)
    email: EmailStr
    phone: str = Field(..., min_length=7, max_length=20)
    address: Optional[str] = Field(default=None, max_length=500)
    idprovince: Optional[UUID] = None
    idcity: Optional[UUID] = None
    requires_credit: bool = False
    credit_limit: Optional[float] = Field(default=None, ge=0)
    credit_days: Optional[int] = Field(default=None, ge=0)
    isactive: Optional[bool] = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("business_name", "address", "idprovince", "idcity", mode="before")
    @classmethod
    def blank_optional(cls, value):
        return _blank_to_none(value)


class ClientUpdate(BaseModel):
    """Schema for updating a client. All fields optional."""

    client_name: Optional[str] = Field(default=None, min_length=2, max_length=200)
    business_name: Optional[str] = Field(default=None, min_length=2, max_length=200)
    ruc_cedula: Optional[str] = Field(default=None, min_length=10, max_length=13)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, min_length=7, max_length=20)
    address: Optional[str] = Field(default=None, max_length=500)
    idprovince: Optional[UUID] = None
    idcity: Optional[UUID] = None
    requires_credit: Optional[bool] = None
    credit_limit: Optional[float] = Field(default=None, ge=0)
    credit_days: Optional[int] = Field(default=None, ge=0)
    isactive: Optional[bool] = None

    @field_validator("business_name", "address", "idprovince", "idcity", mode="before")
    @classmethod
    def blank_optional(cls, value):
        return _blank_to_none(value)


class ClientRead(AuditedRead):
    idclient: UUID
    client_name: str
    business_name: Optional[str] = None
    ruc_cedula: str
    email: str
    phone: str
    address: Optional[str] = None
    idprovince: Optional[UUID] = None
    idcity: Optional[UUID] = None
    requires_credit: bool
    credit_limit: Optional[float] = None
    credit_days: Optional[int] = None
