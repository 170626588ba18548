"""
Organization, membership and contact database models
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Enum, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.models.enums import MemberRole


class Organization(Base):
    """
    A business whose boxes are managed in the system.

    Every box, contact and membership is scoped to exactly one organization.
    """
    __tablename__ = "organizations"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    name = Column(String, nullable=False)
    slug = Column(String, nullable=False, unique=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    memberships = relationship("Membership", back_populates="organization", cascade="all, delete-orphan")
    contacts = relationship("Contact", back_populates="organization", cascade="all, delete-orphan")
    boxes = relationship("Box", back_populates="organization", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Organization(id={self.id}, slug={self.slug})>"


class Membership(Base):
    """
    A user's role inside an organization.

    The role only gates who may move a box in the status machine; the
    transition table itself does not know about roles.
    """
    __tablename__ = "memberships"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    organization_id = Column(String(36), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), nullable=False, index=True)
    email = Column(String, nullable=False)
    role = Column(Enum(MemberRole), default=MemberRole.STAFF, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    organization = relationship("Organization", back_populates="memberships")

    __table_args__ = (
        Index('idx_membership_org_user', 'organization_id', 'user_id', unique=True),
    )

    def __repr__(self):
        return f"<Membership(user_id={self.user_id}, role={self.role.value})>"


class Contact(Base):
    """Counterparty (vendor or customer) of a box."""
    __tablename__ = "contacts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    organization_id = Column(String(36), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    tax_id = Column(String(13), nullable=True)  # Thai juristic/personal tax ID
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    organization = relationship("Organization", back_populates="contacts")

    def __repr__(self):
        return f"<Contact(id={self.id}, name={self.name})>"
