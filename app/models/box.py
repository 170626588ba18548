"""
Box database model
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, Date, Enum, DateTime, ForeignKey, Integer, Numeric, Index
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.models.enums import BoxType, ExpenseType, BoxStatus, PaymentStatus, NO_CASH_RECEIPT


class Box(Base):
    """
    Box model representing one expense or income transaction and its evidence.

    Status transitions follow the table in app.rules.status_transitions:
    DRAFT → SUBMITTED → PENDING → COMPLETED, with NEED_DOCS as a side branch.

    Checklist completion, process steps and validation issues are derived on
    read and never stored here. `wht_sent`, `payment_status` and
    `no_receipt_reason` are the only persisted manual checklist facts.

    `version` is bumped by the ORM on every UPDATE; a status change carrying
    an outdated version is rejected as a stale write.
    """
    __tablename__ = "boxes"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    organization_id = Column(String(36), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    box_number = Column(String, nullable=False)
    box_type = Column(Enum(BoxType), nullable=False)
    expense_type = Column(Enum(ExpenseType), nullable=True)
    status = Column(Enum(BoxStatus), default=BoxStatus.DRAFT, nullable=False)
    payment_status = Column(Enum(PaymentStatus), default=PaymentStatus.UNPAID, nullable=False)

    # Tax flags
    has_vat = Column(Boolean, default=False, nullable=False)
    has_wht = Column(Boolean, default=False, nullable=False)
    wht_sent = Column(Boolean, default=False, nullable=False)
    wht_rate = Column(Numeric(5, 2), nullable=True)
    no_receipt_reason = Column(String, nullable=True)

    contact_id = Column(String(36), ForeignKey("contacts.id", ondelete="SET NULL"), nullable=True, index=True)
    box_date = Column(Date, nullable=False)

    # Amounts
    total_amount = Column(Numeric(14, 2), default=0, nullable=False)
    subtotal_amount = Column(Numeric(14, 2), default=0, nullable=False)
    vat_amount = Column(Numeric(14, 2), default=0, nullable=False)
    wht_amount = Column(Numeric(14, 2), default=0, nullable=False)
    paid_amount = Column(Numeric(14, 2), default=0, nullable=False)

    # Timestamps
    submitted_at = Column(DateTime, nullable=True)
    booked_at = Column(DateTime, nullable=True)
    archived_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    version = Column(Integer, nullable=False)

    # Relationships
    organization = relationship("Organization", back_populates="boxes")
    contact = relationship("Contact")
    documents = relationship("Document", back_populates="box", cascade="all, delete-orphan")
    activity_logs = relationship("ActivityLog", back_populates="box", cascade="all, delete-orphan")

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        # Soft duplicate lookups scan by organization, amount and date
        Index('idx_box_duplicate_lookup', 'organization_id', 'total_amount', 'box_date'),
        Index('idx_box_org_number', 'organization_id', 'box_number', unique=True),
    )

    def __repr__(self):
        return f"<Box(id={self.id}, box_number={self.box_number}, status={self.status.value})>"

    @property
    def is_paid(self) -> bool:
        return self.payment_status in (PaymentStatus.PAID, PaymentStatus.OVERPAID)

    @property
    def no_cash_receipt_confirmed(self) -> bool:
        return self.no_receipt_reason == NO_CASH_RECEIPT
