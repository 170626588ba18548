"""
Organization, member and contact API endpoints
"""
import logging
from typing import List
from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from app.core.database import get_db
from app.models.enums import MemberRole
from app.models.organization import Organization, Membership, Contact
from app.rules.permissions import can_manage_contacts, can_manage_members
from app.schemas.organization import (
    OrganizationCreate,
    OrganizationResponse,
    MemberCreate,
    MemberResponse,
    ContactCreate,
    ContactResponse,
)
from app.api.deps import get_current_member

logger = logging.getLogger(__name__)

router = APIRouter()


def _require_same_organization(organization_id: str, member: Membership) -> None:
    if member.organization_id != organization_id:
        raise HTTPException(
            status_code=404,
            detail=f"Organization with id {organization_id} not found"
        )


@router.post("", response_model=OrganizationResponse, status_code=201)
async def create_organization(
    org_data: OrganizationCreate,
    x_user_id: str = Header(..., description="Authenticated user id"),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a new organization with the caller as its OWNER.

    Args:
        org_data: Organization creation data (name, slug, owner email)
        x_user_id: Creating user, becomes OWNER
        db: Database session

    Returns:
        OrganizationResponse with created organization data

    Raises:
        HTTPException 409: If an organization with the same slug already exists
    """
    result = await db.execute(
        select(Organization).where(Organization.slug == org_data.slug)
    )
    if result.scalar_one_or_none():
        raise HTTPException(
            status_code=409,
            detail=f"Organization with slug {org_data.slug} already exists"
        )

    organization = Organization(name=org_data.name, slug=org_data.slug)
    db.add(organization)
    await db.flush()

    db.add(Membership(
        organization_id=organization.id,
        user_id=x_user_id,
        email=org_data.owner_email.lower(),
        role=MemberRole.OWNER
    ))
    await db.flush()
    await db.refresh(organization)

    logger.info("Organization %s created by %s", organization.slug, x_user_id)
    return organization


@router.post("/{organization_id}/members", response_model=MemberResponse, status_code=201)
async def add_member(
    organization_id: str,
    member_data: MemberCreate,
    member: Membership = Depends(get_current_member),
    db: AsyncSession = Depends(get_db)
):
    """
    Add a user to the organization.

    Raises:
        HTTPException 403: If the caller is not an owner or admin
        HTTPException 404: If the organization is not the caller's
        HTTPException 409: If the user is already a member
    """
    _require_same_organization(organization_id, member)
    if not can_manage_members(member.role):
        raise HTTPException(
            status_code=403,
            detail="Only an owner or admin can add members"
        )

    new_member = Membership(
        organization_id=organization_id,
        user_id=member_data.user_id,
        email=member_data.email.lower(),
        role=member_data.role
    )
    db.add(new_member)

    try:
        await db.flush()
        await db.refresh(new_member)
    except IntegrityError:
        raise HTTPException(
            status_code=409,
            detail=f"User {member_data.user_id} is already a member"
        )

    return new_member


@router.get("/{organization_id}/members", response_model=List[MemberResponse])
async def list_members(
    organization_id: str,
    member: Membership = Depends(get_current_member),
    db: AsyncSession = Depends(get_db)
):
    _require_same_organization(organization_id, member)
    result = await db.execute(
        select(Membership)
        .where(Membership.organization_id == organization_id)
        .order_by(Membership.created_at)
    )
    return result.scalars().all()


@router.post("/{organization_id}/contacts", response_model=ContactResponse, status_code=201)
async def create_contact(
    organization_id: str,
    contact_data: ContactCreate,
    member: Membership = Depends(get_current_member),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a counterparty for the organization.

    Raises:
        HTTPException 403: If the caller has no accounting role
        HTTPException 404: If the organization is not the caller's
    """
    _require_same_organization(organization_id, member)
    if not can_manage_contacts(member.role):
        raise HTTPException(
            status_code=403,
            detail="Only accounting roles can manage contacts"
        )

    contact = Contact(
        organization_id=organization_id,
        name=contact_data.name,
        tax_id=contact_data.tax_id
    )
    db.add(contact)
    await db.flush()
    await db.refresh(contact)

    return contact


@router.get("/{organization_id}/contacts", response_model=List[ContactResponse])
async def list_contacts(
    organization_id: str,
    member: Membership = Depends(get_current_member),
    db: AsyncSession = Depends(get_db)
):
    _require_same_organization(organization_id, member)
    result = await db.execute(
        select(Contact)
        .where(Contact.organization_id == organization_id)
        .order_by(Contact.name)
    )
    return result.scalars().all()
