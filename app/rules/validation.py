"""
Box validation engine.

Each rule looks at one aspect of a box and returns zero or more issues. Rules
are independent of each other and registered in VALIDATION_RULES. Findings are
data returned with a successful read, not errors.

Severity:
    error   - the box is not ready to be booked
    warning - worth checking before booking
    info    - suggestion
"""
import re
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Iterable, List, Optional, Sequence
from app.core.config import settings
from app.models.enums import BoxStatus, ExpenseType, DocType, Severity, NO_CASH_RECEIPT
from app.rules.duplicates import find_possible_duplicates
from app.rules.requirements import SLIP_TYPES, check_completeness, get_required_documents
from app.schemas.box import BoxSnapshot, BoxSummary
from app.schemas.document import DocumentSnapshot
from app.schemas.validation import ValidationIssue, ValidationResult, ValidationSummary

TAX_ID_PATTERN = re.compile(r"^\d{13}$")

# Documents whose amount should agree with the box total
PRIMARY_DOC_TYPES = (
    DocType.TAX_INVOICE,
    DocType.TAX_INVOICE_ABB,
    DocType.INVOICE,
    DocType.FOREIGN_INVOICE,
    DocType.RECEIPT,
    DocType.CASH_RECEIPT,
)


@dataclass(frozen=True)
class ValidationConfig:
    amount_tolerance: Decimal = Decimal("1.00")
    vat_rate: Decimal = Decimal("7")
    vat_rate_tolerance: Decimal = Decimal("0.5")
    stale_draft_days: int = 7
    duplicate_window_days: int = 3
    duplicate_amount_tolerance: Decimal = Decimal("0.01")

    @classmethod
    def from_settings(cls) -> "ValidationConfig":
        return cls(
            amount_tolerance=settings.AMOUNT_TOLERANCE,
            vat_rate=settings.VAT_RATE,
            vat_rate_tolerance=settings.VAT_RATE_TOLERANCE,
            stale_draft_days=settings.STALE_DRAFT_DAYS,
            duplicate_window_days=settings.DUPLICATE_WINDOW_DAYS,
            duplicate_amount_tolerance=settings.DUPLICATE_AMOUNT_TOLERANCE,
        )


@dataclass
class ValidationContext:
    box: BoxSnapshot
    documents: Sequence[DocumentSnapshot]
    other_boxes: Sequence[BoxSummary]
    now: datetime
    config: ValidationConfig
    doc_types: set = field(init=False)

    def __post_init__(self):
        self.doc_types = {doc.doc_type for doc in self.documents}


def to_decimal(value: Any) -> Optional[Decimal]:
    """Convert an AI-extracted number (often a float or a string) to Decimal"""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = Decimal(str(value).replace(",", ""))
    except InvalidOperation:
        return None
    return result if result.is_finite() else None


def _money(value: Decimal) -> str:
    return f"{value:,.2f}"


def check_missing_documents(ctx: ValidationContext) -> List[ValidationIssue]:
    box = ctx.box
    if box.no_receipt_reason and box.no_receipt_reason != NO_CASH_RECEIPT:
        return []

    requirements = get_required_documents(box.box_type, box.expense_type, box.has_vat, box.has_wht)
    issues = []
    for requirement in check_completeness(requirements, ctx.doc_types).missing:
        if requirement.id == "cash_receipt" and box.no_receipt_reason:
            continue
        issues.append(ValidationIssue(
            id=f"missing-{requirement.id.replace('_', '-')}",
            severity=Severity.ERROR if requirement.id == "tax_invoice" else Severity.WARNING,
            code=f"MISSING_{requirement.id.upper()}",
            message=f"{requirement.label} has not been uploaded",
            suggestion=requirement.description,
        ))
    return issues


def check_paid_without_slip(ctx: ValidationContext) -> List[ValidationIssue]:
    if ctx.box.paid_amount > 0 and not any(t in ctx.doc_types for t in SLIP_TYPES):
        return [ValidationIssue(
            id="missing-slip",
            severity=Severity.INFO,
            code="MISSING_SLIP",
            message="Marked as paid but no transfer slip is attached",
            suggestion="Upload the transfer slip or a copy of the cheque",
            can_dismiss=True,
        )]
    return []


def check_document_amounts(ctx: ValidationContext) -> List[ValidationIssue]:
    total = ctx.box.total_amount
    if total <= 0:
        return []

    issues = []
    for doc in ctx.documents:
        if doc.doc_type not in PRIMARY_DOC_TYPES or doc.amount is None:
            continue
        if abs(doc.amount - total) > ctx.config.amount_tolerance:
            issues.append(ValidationIssue(
                id=f"doc-amount-mismatch-{doc.id}",
                severity=Severity.WARNING,
                code="DOC_AMOUNT_MISMATCH",
                message=f"{doc.doc_type.value} amount ({_money(doc.amount)}) differs from box total ({_money(total)})",
                suggestion="Check the box total or the amount entered on the document",
                field="total_amount",
                can_dismiss=True,
            ))
    return issues


def check_slip_amount(ctx: ValidationContext) -> List[ValidationIssue]:
    box = ctx.box
    slip_amount = None
    for doc in ctx.documents:
        if doc.doc_type in SLIP_TYPES:
            slip_amount = to_decimal(doc.ai_value("amount"))
            if slip_amount is not None:
                break
    if slip_amount is None or box.total_amount <= 0:
        return []

    expected = box.total_amount - box.wht_amount
    if abs(slip_amount - expected) <= ctx.config.amount_tolerance:
        return []

    if box.has_wht and box.wht_amount == 0:
        return [ValidationIssue(
            id="amount-wht-mismatch",
            severity=Severity.WARNING,
            code="AMOUNT_WHT_MISMATCH",
            message=f"Slip amount ({_money(slip_amount)}) does not match the invoice total ({_money(box.total_amount)})",
            suggestion="The difference may be withholding tax. Enter the WHT rate and amount",
            field="wht_amount",
            can_dismiss=True,
        )]
    return [ValidationIssue(
        id="amount-general-mismatch",
        severity=Severity.WARNING,
        code="AMOUNT_MISMATCH",
        message=f"Slip amount ({_money(slip_amount)}) does not match the expected payment ({_money(expected)})",
        suggestion="The payment may have been split or discounted",
        can_dismiss=True,
    )]


def check_ai_amounts(ctx: ValidationContext) -> List[ValidationIssue]:
    issues = []
    for doc in ctx.documents:
        extracted = to_decimal(doc.ai_value("amount"))
        if doc.amount is None or extracted is None:
            continue
        if abs(extracted - doc.amount) > ctx.config.amount_tolerance:
            issues.append(ValidationIssue(
                id=f"ai-amount-mismatch-{doc.id}",
                severity=Severity.WARNING,
                code="AI_AMOUNT_MISMATCH",
                message=f"Amount read from {doc.filename or doc.doc_type.value} ({_money(extracted)}) "
                        f"differs from the amount entered ({_money(doc.amount)})",
                suggestion="Compare the entered amount against the document",
                can_dismiss=True,
            ))
    return issues


def check_vat(ctx: ValidationContext) -> List[ValidationIssue]:
    box = ctx.box
    if box.expense_type != ExpenseType.STANDARD:
        return []

    if box.total_amount > 0 and box.vat_amount > 0:
        base = box.total_amount - box.vat_amount
        if base <= 0:
            return []
        rate = box.vat_amount / base * 100
        if abs(rate - ctx.config.vat_rate) > ctx.config.vat_rate_tolerance:
            return [ValidationIssue(
                id="vat-rate-unusual",
                severity=Severity.WARNING,
                code="VAT_RATE_UNUSUAL",
                message=f"Calculated VAT rate is {rate:.2f}% (expected {ctx.config.vat_rate}%)",
                suggestion="Check the amount before VAT and the VAT amount",
                field="vat_amount",
                can_dismiss=True,
            )]
    elif box.total_amount > 0:
        return [ValidationIssue(
            id="vat-missing",
            severity=Severity.INFO,
            code="VAT_MISSING",
            message="VAT amount has not been entered",
            suggestion="Enter the VAT amount from the tax invoice",
            field="vat_amount",
        )]
    return []


def check_wht(ctx: ValidationContext) -> List[ValidationIssue]:
    box = ctx.box
    if not box.has_wht:
        return []

    rate = box.wht_rate or Decimal("0")
    if rate == 0 and box.wht_amount == 0:
        return [ValidationIssue(
            id="wht-rate-missing",
            severity=Severity.WARNING,
            code="WHT_RATE_MISSING",
            message="Withholding tax is enabled but no rate is set",
            suggestion="Set the WHT rate (1%, 2%, 3% or 5%)",
            field="wht_rate",
        )]

    if rate > 0 and box.wht_amount > 0:
        expected = (box.total_amount - box.vat_amount) * rate / 100
        if abs(expected - box.wht_amount) > ctx.config.amount_tolerance:
            return [ValidationIssue(
                id="wht-amount-mismatch",
                severity=Severity.WARNING,
                code="WHT_AMOUNT_MISMATCH",
                message=f"WHT at {rate}% should be {_money(expected)} but {_money(box.wht_amount)} was entered",
                suggestion="Check the withholding tax amount",
                field="wht_amount",
                can_dismiss=True,
            )]
    return []


def check_counterparty_tax_id(ctx: ValidationContext) -> List[ValidationIssue]:
    box = ctx.box
    issues = []
    contact_tax_id = box.contact.tax_id if box.contact else None

    ai_tax_id = next(
        (str(doc.ai_value("tax_id")) for doc in ctx.documents if doc.ai_value("tax_id")),
        None,
    )
    if ai_tax_id and contact_tax_id and ai_tax_id.replace("-", "") != contact_tax_id:
        issues.append(ValidationIssue(
            id="taxid-mismatch",
            severity=Severity.WARNING,
            code="TAXID_MISMATCH",
            message=f"Tax ID on the document ({ai_tax_id}) does not match the selected counterparty ({contact_tax_id})",
            suggestion="Check that the right counterparty is selected",
            field="contact_id",
            can_dismiss=True,
        ))

    vat_bearing = box.has_vat or box.vat_amount > 0
    if vat_bearing and not (contact_tax_id and TAX_ID_PATTERN.match(contact_tax_id)):
        issues.append(ValidationIssue(
            id="contact-taxid-required",
            severity=Severity.WARNING,
            code="CONTACT_TAXID_MISSING",
            message="Counterparty has no valid 13-digit tax ID (required for VAT)",
            suggestion="Add the tax ID to the counterparty or pick one that has it",
            field="contact_id",
            can_dismiss=True,
        ))
    return issues


def check_stale_draft(ctx: ValidationContext) -> List[ValidationIssue]:
    box = ctx.box
    if box.status != BoxStatus.DRAFT:
        return []
    age = (ctx.now - box.created_at).days
    if age >= ctx.config.stale_draft_days:
        return [ValidationIssue(
            id="stale-draft",
            severity=Severity.WARNING,
            code="STALE_DRAFT",
            message=f"Box has been a draft for {age} days",
            suggestion="Submit it to accounting or delete it if it is no longer needed",
            can_dismiss=True,
        )]
    return []


def check_possible_duplicates(ctx: ValidationContext) -> List[ValidationIssue]:
    matches = find_possible_duplicates(
        ctx.box,
        ctx.other_boxes,
        window_days=ctx.config.duplicate_window_days,
        amount_tolerance=ctx.config.duplicate_amount_tolerance,
    )
    return [
        ValidationIssue(
            id=f"possible-duplicate-{match.box_id}",
            severity=Severity.WARNING,
            code="POSSIBLE_DUPLICATE",
            message=f"Possible duplicate of {match.box_number}: {match.reason}",
            suggestion="Check whether the same transaction was recorded twice",
            can_dismiss=True,
        )
        for match in matches
    ]


ValidationRule = Callable[[ValidationContext], List[ValidationIssue]]

VALIDATION_RULES: List[ValidationRule] = [
    check_missing_documents,
    check_paid_without_slip,
    check_document_amounts,
    check_slip_amount,
    check_ai_amounts,
    check_vat,
    check_wht,
    check_counterparty_tax_id,
    check_stale_draft,
    check_possible_duplicates,
]


def summarize(issues: List[ValidationIssue]) -> ValidationResult:
    summary = ValidationSummary(
        errors=sum(1 for i in issues if i.severity == Severity.ERROR),
        warnings=sum(1 for i in issues if i.severity == Severity.WARNING),
        info=sum(1 for i in issues if i.severity == Severity.INFO),
    )
    return ValidationResult(
        is_valid=summary.errors == 0,
        has_warnings=summary.warnings > 0,
        issues=issues,
        summary=summary,
    )


def validate_box(
    box: BoxSnapshot,
    documents: Optional[Sequence[DocumentSnapshot]] = None,
    *,
    other_boxes: Iterable[BoxSummary] = (),
    now: Optional[datetime] = None,
    config: Optional[ValidationConfig] = None,
) -> ValidationResult:
    """Run every registered rule against a box snapshot.

    Args:
        box: Box snapshot with contact loaded
        documents: Documents to check, defaults to box.documents
        other_boxes: Duplicate candidates from the same organization
        now: Reference time for the stale draft rule (naive UTC)
        config: Thresholds, defaults to the application settings
    """
    ctx = ValidationContext(
        box=box,
        documents=list(box.documents if documents is None else documents),
        other_boxes=list(other_boxes),
        now=now or datetime.utcnow(),
        config=config or ValidationConfig.from_settings(),
    )
    issues: List[ValidationIssue] = []
    for rule in VALIDATION_RULES:
        issues.extend(rule(ctx))
    return summarize(issues)


def filter_dismissed(result: ValidationResult, dismissed_ids: Iterable[str]) -> ValidationResult:
    """Drop dismissible issues the caller has dismissed and recount"""
    dismissed = set(dismissed_ids)
    kept = [i for i in result.issues if not (i.can_dismiss and i.id in dismissed)]
    return summarize(kept)
