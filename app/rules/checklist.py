"""
Checklist generator.

Items are derived from the box flags and the document types on the box every
time they are read. Document-gated items are completed exactly when the
matching requirement from the resolver is satisfied, so the checklist and the
missing-document checks never disagree. Toggle items look only at the
persisted box flags. The NO_VAT cash receipt item is the one hybrid: an upload
or the "no cash receipt" confirmation completes it.
"""
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set, Tuple
from app.models.enums import BoxType, ExpenseType, DocType, DocStatus, NO_CASH_RECEIPT
from app.rules.requirements import get_required_documents, is_requirement_satisfied
from app.schemas.box import BoxSummary, BoxSnapshot
from app.schemas.checklist import ChecklistItem
from app.schemas.requirements import RequiredDocument

# item id -> item ids that must be complete before it can be switched on
CHECKLIST_DEPENDENCIES: Dict[str, Tuple[str, ...]] = {
    "whtSent": ("whtIssued",),
}

TOGGLEABLE_ITEMS = ("isPaid", "whtSent", "hasCashReceipt")


@dataclass(frozen=True)
class ChecklistFlags:
    """Manually confirmed facts persisted on the box"""
    is_paid: bool = False
    wht_sent: bool = False
    no_cash_receipt_confirmed: bool = False


def checklist_flags_for(box: BoxSummary) -> ChecklistFlags:
    return ChecklistFlags(
        is_paid=box.is_paid,
        wht_sent=box.wht_sent,
        no_cash_receipt_confirmed=box.no_cash_receipt_confirmed,
    )


class _Requirements:
    """Resolved requirements for one box, looked up by requirement id"""

    def __init__(self, requirements: List[RequiredDocument], uploaded: Set[DocType]):
        self._by_id = {requirement.id: requirement for requirement in requirements}
        self._uploaded = uploaded

    def get(self, requirement_id: str) -> Optional[RequiredDocument]:
        return self._by_id.get(requirement_id)

    def satisfied(self, requirement: RequiredDocument) -> bool:
        return is_requirement_satisfied(requirement, self._uploaded)


def _document_item(requirements: _Requirements, requirement: RequiredDocument, item_id: str,
                   label: str, description: str) -> ChecklistItem:
    return ChecklistItem(
        id=item_id,
        label=label,
        description=description,
        required=requirement.required,
        completed=requirements.satisfied(requirement),
        related_doc_type=requirement.doc_type,
    )


def _expense_items(flags: ChecklistFlags, requirements: _Requirements) -> List[ChecklistItem]:
    items = [
        ChecklistItem(
            id="isPaid",
            label="Paid",
            description="Confirm the vendor has been paid",
            required=True,
            completed=flags.is_paid,
            can_toggle=True,
        ),
    ]

    voucher = requirements.get("petty_cash_voucher")
    proof = requirements.get("payment_proof")
    if voucher is not None:
        items.append(_document_item(
            requirements, voucher, "hasPaymentProof", "Payment voucher", "Upload the petty cash voucher or bill",
        ))
    elif proof is not None:
        items.append(_document_item(
            requirements, proof, "hasPaymentProof", "Payment proof", "Upload the transfer slip, cheque or statement",
        ))

    tax_invoice = requirements.get("tax_invoice")
    if tax_invoice is not None:
        items.append(_document_item(
            requirements, tax_invoice, "hasTaxInvoice", "Tax invoice", "Upload the tax invoice from the vendor",
        ))
    expense_doc = requirements.get("expense_doc")
    if expense_doc is not None:
        items.append(_document_item(
            requirements, expense_doc, "hasExpenseDocument", "Expense document",
            "Upload the tax invoice, receipt or cash bill",
        ))

    cash_receipt = requirements.get("cash_receipt")
    if cash_receipt is not None:
        items.append(ChecklistItem(
            id="hasCashReceipt",
            label="Cash receipt",
            description="Confirmed there is no cash receipt" if flags.no_cash_receipt_confirmed
            else "Upload the cash bill, or confirm there is none",
            required=cash_receipt.required,
            completed=requirements.satisfied(cash_receipt) or flags.no_cash_receipt_confirmed,
            related_doc_type=cash_receipt.doc_type,
            can_toggle=True,
        ))

    foreign_invoice = requirements.get("foreign_invoice")
    if foreign_invoice is not None:
        items.append(_document_item(
            requirements, foreign_invoice, "hasForeignInvoice", "Foreign invoice",
            "Upload the invoice from the overseas vendor",
        ))

    wht = requirements.get("wht")
    if wht is not None:
        items.append(_document_item(
            requirements, wht, "whtIssued", "WHT certificate issued", "Upload the withholding tax certificate",
        ))
        items.append(ChecklistItem(
            id="whtSent",
            label="WHT certificate sent",
            description="Confirm the certificate was sent to the vendor",
            required=True,
            completed=flags.wht_sent,
            can_toggle=True,
        ))

    return items


def _income_items(flags: ChecklistFlags, requirements: _Requirements) -> List[ChecklistItem]:
    items = [
        _document_item(
            requirements, requirements.get("invoice"), "hasInvoice", "Invoice issued",
            "Upload the invoice sent to the customer",
        ),
    ]
    tax_invoice = requirements.get("tax_invoice")
    if tax_invoice is not None:
        items.append(_document_item(
            requirements, tax_invoice, "hasTaxInvoice", "Tax invoice issued",
            "Upload the tax invoice sent to the customer",
        ))
    items.append(ChecklistItem(
        id="isPaid",
        label="Payment received",
        description="Confirm the customer has paid",
        required=True,
        completed=flags.is_paid,
        can_toggle=True,
    ))
    items.append(_document_item(
        requirements, requirements.get("payment_proof"), "hasPaymentProof", "Proof of receipt",
        "Upload the incoming transfer slip or receipt",
    ))
    wht = requirements.get("wht_incoming")
    if wht is not None:
        items.append(_document_item(
            requirements, wht, "whtReceived", "WHT certificate received",
            "Upload the withholding tax certificate from the customer",
        ))
    return items


def apply_dependencies(items: List[ChecklistItem]) -> List[ChecklistItem]:
    """Block toggle items whose prerequisites are not complete yet.

    An item that is already completed stays toggleable so it can be
    switched off again.
    """
    completed = {item.id: item.completed for item in items}
    result = []
    for item in items:
        deps = CHECKLIST_DEPENDENCIES.get(item.id, ())
        blocked_by = [dep for dep in deps if dep in completed and not completed[dep]]
        if blocked_by and not item.completed:
            item = item.model_copy(update={"can_toggle": False, "blocked_by": blocked_by})
        result.append(item)
    return result


def get_checklist(
    transaction_type: BoxType,
    has_vat: bool,
    has_wht: bool,
    flags: ChecklistFlags,
    uploaded_doc_types: Iterable[DocType],
    expense_type: Optional[ExpenseType] = None,
) -> List[ChecklistItem]:
    """Build the ordered checklist for a box"""
    requirements = _Requirements(
        get_required_documents(transaction_type, expense_type, has_vat, has_wht),
        set(uploaded_doc_types),
    )

    if transaction_type == BoxType.EXPENSE:
        items = _expense_items(flags, requirements)
    elif transaction_type == BoxType.INCOME:
        items = _income_items(flags, requirements)
    else:
        items = [
            _document_item(
                requirements, requirements.get("adjustment_doc"), "hasDocument", "Supporting document",
                "Credit note, debit note or refund evidence",
            ),
        ]

    return apply_dependencies(items)


def get_box_checklist(box: BoxSnapshot) -> List[ChecklistItem]:
    return get_checklist(
        box.box_type,
        box.has_vat,
        box.has_wht,
        checklist_flags_for(box),
        box.uploaded_doc_types,
        expense_type=box.expense_type,
    )


def find_item(items: List[ChecklistItem], item_id: str) -> Optional[ChecklistItem]:
    return next((item for item in items if item.id == item_id), None)


def calculate_completion_percent(items: List[ChecklistItem]) -> int:
    required = [item for item in items if item.required]
    if not required:
        return 100
    done = sum(1 for item in required if item.completed)
    # round half up, matching how percentages are displayed
    return int(100 * done / len(required) + 0.5)


def is_all_required_complete(items: List[ChecklistItem]) -> bool:
    return all(item.completed for item in items if item.required)


def determine_doc_status(items: List[ChecklistItem], no_receipt_reason: Optional[str] = None) -> DocStatus:
    """Summarize document completeness for a box.

    A recorded no-receipt reason other than the cash receipt confirmation
    means no documents are expected at all.
    """
    if no_receipt_reason and no_receipt_reason != NO_CASH_RECEIPT:
        return DocStatus.NA
    return DocStatus.COMPLETE if is_all_required_complete(items) else DocStatus.INCOMPLETE
