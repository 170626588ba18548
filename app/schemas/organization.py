"""
Organization, member and contact Pydantic schemas
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field
from app.models.enums import MemberRole


class OrganizationCreate(BaseModel):
    """Schema for creating a new organization"""
    name: str = Field(..., min_length=1, max_length=255, description="Business name")
    slug: str = Field(..., min_length=1, max_length=64, pattern=r"^[a-z0-9-]+$", description="URL-safe identifier")
    owner_email: EmailStr = Field(..., description="Email of the creating user, who becomes OWNER")


class OrganizationResponse(BaseModel):
    id: str = Field(..., description="Organization UUID")
    name: str
    slug: str
    created_at: datetime

    class Config:
        from_attributes = True


class MemberCreate(BaseModel):
    """Schema for adding a user to an organization"""
    user_id: str = Field(..., min_length=1, max_length=36, description="Identity provider user id")
    email: EmailStr
    role: MemberRole = MemberRole.STAFF


class MemberResponse(BaseModel):
    id: str
    organization_id: str
    user_id: str
    email: str
    role: MemberRole

    class Config:
        from_attributes = True


class ContactCreate(BaseModel):
    """Schema for creating a counterparty"""
    name: str = Field(..., min_length=1, max_length=255)
    tax_id: Optional[str] = Field(None, pattern=r"^\d{13}$", description="13-digit Thai tax ID")


class ContactResponse(BaseModel):
    id: str
    name: str
    tax_id: Optional[str] = None

    class Config:
        from_attributes = True
