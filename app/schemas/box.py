"""
Box Pydantic schemas
"""
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional, Set
from pydantic import BaseModel, Field, model_validator
from app.models.enums import BoxType, ExpenseType, BoxStatus, PaymentStatus, DocType, NO_CASH_RECEIPT
from app.schemas.document import DocumentSnapshot
from app.schemas.organization import ContactResponse


class BoxCreate(BaseModel):
    """Schema for creating a new box"""
    box_type: BoxType
    expense_type: Optional[ExpenseType] = Field(None, description="Only meaningful for EXPENSE boxes")
    box_number: Optional[str] = Field(None, max_length=64, description="Generated when omitted")
    box_date: date
    contact_id: Optional[str] = None
    has_vat: bool = False
    has_wht: bool = False
    wht_rate: Optional[Decimal] = Field(None, ge=0, le=100)
    total_amount: Decimal = Field(Decimal("0"), ge=0)
    subtotal_amount: Decimal = Field(Decimal("0"), ge=0)
    vat_amount: Decimal = Field(Decimal("0"), ge=0)
    wht_amount: Decimal = Field(Decimal("0"), ge=0)
    no_receipt_reason: Optional[str] = Field(
        None, max_length=64, description="Why no receipt is expected, e.g. NO_CASH_RECEIPT or ONLINE_PURCHASE"
    )

    @model_validator(mode="after")
    def check_expense_type(self) -> "BoxCreate":
        if self.box_type == BoxType.EXPENSE and self.expense_type is None:
            self.expense_type = ExpenseType.STANDARD
        if self.box_type != BoxType.EXPENSE and self.expense_type is not None:
            raise ValueError("expense_type is only allowed for EXPENSE boxes")
        return self


class BoxSummary(BaseModel):
    """Box fields without relationships (duplicate candidates, listings)"""
    id: str
    organization_id: str
    box_number: str
    box_type: BoxType
    expense_type: Optional[ExpenseType] = None
    status: BoxStatus = BoxStatus.DRAFT
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    has_vat: bool = False
    has_wht: bool = False
    wht_sent: bool = False
    wht_rate: Optional[Decimal] = None
    no_receipt_reason: Optional[str] = None
    contact_id: Optional[str] = None
    box_date: date
    total_amount: Decimal = Decimal("0")
    subtotal_amount: Decimal = Decimal("0")
    vat_amount: Decimal = Decimal("0")
    wht_amount: Decimal = Decimal("0")
    paid_amount: Decimal = Decimal("0")
    submitted_at: Optional[datetime] = None
    booked_at: Optional[datetime] = None
    archived_at: Optional[datetime] = None
    created_at: datetime
    version: int = 1

    class Config:
        from_attributes = True

    @property
    def is_paid(self) -> bool:
        return self.payment_status in (PaymentStatus.PAID, PaymentStatus.OVERPAID)

    @property
    def no_cash_receipt_confirmed(self) -> bool:
        return self.no_receipt_reason == NO_CASH_RECEIPT


class BoxSnapshot(BoxSummary):
    """Fully materialized box with its contact and documents.

    This is the single input every rule module reads from.
    """
    contact: Optional[ContactResponse] = None
    documents: List[DocumentSnapshot] = Field(default_factory=list)

    @property
    def uploaded_doc_types(self) -> Set[DocType]:
        return {doc.doc_type for doc in self.documents}


class StatusChangeRequest(BaseModel):
    """Schema for a status change"""
    target_status: BoxStatus
    reason: Optional[str] = Field(None, max_length=1000, description="Required for backward transitions")
    expected_version: Optional[int] = Field(None, ge=1, description="Box version the caller last saw")


class TransitionOption(BaseModel):
    """A status the caller may move the box to"""
    to: BoxStatus
    label: str
    requires_reason: bool
    direction: str = Field(..., description="advance or revert")
    primary: bool = Field(False, description="The usual next step from this status")


class TransitionsResponse(BaseModel):
    box_id: str
    status: BoxStatus
    status_label: str
    status_description: str
    version: int
    transitions: List[TransitionOption]
