"""
Required document resolver.

Each expense sub-type maps to a fixed set of document requirements. A
requirement is satisfied when any of its matching document types is present.
"""
from typing import Dict, Iterable, List, Optional, Tuple
from app.models.enums import BoxType, ExpenseType, DocType
from app.schemas.requirements import RequiredDocument, CompletenessResult

# Document type families
PAYMENT_EVIDENCE_TYPES = (
    DocType.SLIP_TRANSFER,
    DocType.SLIP_CHEQUE,
    DocType.BANK_STATEMENT,
    DocType.CREDIT_CARD_STATEMENT,
    DocType.ONLINE_RECEIPT,
    DocType.PETTY_CASH_VOUCHER,
)
SLIP_TYPES = (DocType.SLIP_TRANSFER, DocType.SLIP_CHEQUE)
TAX_INVOICE_TYPES = (DocType.TAX_INVOICE, DocType.TAX_INVOICE_ABB)
CASH_RECEIPT_TYPES = (DocType.CASH_RECEIPT, DocType.RECEIPT, DocType.OTHER)
WHT_INCOMING_TYPES = (DocType.WHT_INCOMING, DocType.WHT_RECEIVED)
ADJUSTMENT_TYPES = (DocType.CREDIT_NOTE, DocType.DEBIT_NOTE, DocType.REFUND_RECEIPT)

_TAX_INVOICE = {
    "id": "tax_invoice",
    "doc_type": DocType.TAX_INVOICE,
    "label": "Tax invoice",
    "description": "Main document for claiming input VAT",
    "required": True,
    "matching_doc_types": TAX_INVOICE_TYPES,
}

_PAYMENT_PROOF = {
    "id": "payment_proof",
    "doc_type": DocType.SLIP_TRANSFER,
    "label": "Payment proof",
    "description": "Transfer slip, cheque or bank statement",
    "required": True,
    "matching_doc_types": (
        DocType.SLIP_TRANSFER,
        DocType.SLIP_CHEQUE,
        DocType.BANK_STATEMENT,
        DocType.CREDIT_CARD_STATEMENT,
    ),
}

EXPENSE_REQUIREMENTS: Dict[Optional[ExpenseType], Tuple[dict, ...]] = {
    ExpenseType.STANDARD: (_TAX_INVOICE, _PAYMENT_PROOF),
    ExpenseType.NO_VAT: (
        {
            "id": "cash_receipt",
            "doc_type": DocType.CASH_RECEIPT,
            "label": "Cash receipt",
            "description": "Cash bill or receipt from the vendor",
            "required": True,
            "matching_doc_types": CASH_RECEIPT_TYPES,
        },
        {**_PAYMENT_PROOF, "matching_doc_types": (DocType.SLIP_TRANSFER, DocType.SLIP_CHEQUE, DocType.BANK_STATEMENT)},
    ),
    ExpenseType.PETTY_CASH: (
        {
            "id": "petty_cash_voucher",
            "doc_type": DocType.PETTY_CASH_VOUCHER,
            "label": "Petty cash voucher",
            "description": "Payment voucher or cash bill",
            "required": False,
            "matching_doc_types": (DocType.PETTY_CASH_VOUCHER, DocType.CASH_RECEIPT, DocType.RECEIPT),
        },
    ),
    ExpenseType.FOREIGN: (
        {
            "id": "foreign_invoice",
            "doc_type": DocType.FOREIGN_INVOICE,
            "label": "Foreign invoice",
            "description": "Invoice issued by the overseas vendor",
            "required": True,
            "matching_doc_types": (DocType.FOREIGN_INVOICE,),
        },
        _PAYMENT_PROOF,
    ),
    None: (
        {
            "id": "expense_doc",
            "doc_type": DocType.TAX_INVOICE,
            "label": "Expense document",
            "description": "Tax invoice, receipt or cash bill",
            "required": True,
            "matching_doc_types": TAX_INVOICE_TYPES + (DocType.RECEIPT, DocType.CASH_RECEIPT),
        },
        {**_PAYMENT_PROOF, "matching_doc_types": (DocType.SLIP_TRANSFER, DocType.SLIP_CHEQUE, DocType.BANK_STATEMENT)},
    ),
}

EXPENSE_WHT_REQUIREMENT = {
    "id": "wht",
    "doc_type": DocType.WHT_SENT,
    "label": "WHT certificate",
    "description": "Withholding tax certificate issued to the vendor",
    "required": True,
    "matching_doc_types": (DocType.WHT_SENT,),
}

INCOME_REQUIREMENTS: Tuple[dict, ...] = (
    {
        "id": "invoice",
        "doc_type": DocType.INVOICE,
        "label": "Invoice",
        "description": "Invoice issued to the customer",
        "required": True,
        "matching_doc_types": (DocType.INVOICE,),
    },
    {
        "id": "payment_proof",
        "doc_type": DocType.RECEIPT,
        "label": "Payment proof",
        "description": "Incoming transfer slip or receipt",
        "required": False,
        "matching_doc_types": (DocType.RECEIPT, DocType.SLIP_TRANSFER, DocType.BANK_STATEMENT),
    },
)

INCOME_VAT_REQUIREMENT = {
    "id": "tax_invoice",
    "doc_type": DocType.TAX_INVOICE,
    "label": "Tax invoice",
    "description": "Tax invoice issued to the customer",
    "required": True,
    "matching_doc_types": (DocType.TAX_INVOICE,),
}

INCOME_WHT_REQUIREMENT = {
    "id": "wht_incoming",
    "doc_type": DocType.WHT_INCOMING,
    "label": "WHT certificate",
    "description": "Withholding tax certificate received from the customer",
    "required": True,
    "matching_doc_types": WHT_INCOMING_TYPES,
}

ADJUSTMENT_REQUIREMENTS: Tuple[dict, ...] = (
    {
        "id": "adjustment_doc",
        "doc_type": DocType.CREDIT_NOTE,
        "label": "Adjustment document",
        "description": "Credit note, debit note or refund receipt",
        "required": True,
        "matching_doc_types": ADJUSTMENT_TYPES,
    },
)


def _build(entries: Iterable[dict]) -> List[RequiredDocument]:
    return [RequiredDocument(**entry) for entry in entries]


def get_required_documents(
    box_type: BoxType,
    expense_type: Optional[ExpenseType],
    has_vat: bool,
    has_wht: bool,
) -> List[RequiredDocument]:
    """Resolve the document requirements for a box configuration.

    For expense boxes the sub-type already encodes whether a tax invoice is
    expected, so has_vat does not change the set. The WHT requirement is
    appended whenever has_wht is set.
    """
    entries: List[dict] = []

    if box_type == BoxType.EXPENSE:
        entries.extend(EXPENSE_REQUIREMENTS.get(expense_type, EXPENSE_REQUIREMENTS[None]))
        if has_wht:
            entries.append(EXPENSE_WHT_REQUIREMENT)
    elif box_type == BoxType.INCOME:
        entries.append(INCOME_REQUIREMENTS[0])
        if has_vat:
            entries.append(INCOME_VAT_REQUIREMENT)
        entries.extend(INCOME_REQUIREMENTS[1:])
        if has_wht:
            entries.append(INCOME_WHT_REQUIREMENT)
    else:
        entries.extend(ADJUSTMENT_REQUIREMENTS)

    return _build(entries)


def does_doc_type_match(doc_type: DocType, requirement: RequiredDocument) -> bool:
    return doc_type in requirement.matching_doc_types


def is_requirement_satisfied(requirement: RequiredDocument, present_doc_types: Iterable[DocType]) -> bool:
    present = set(present_doc_types)
    return any(doc_type in present for doc_type in requirement.matching_doc_types)


def check_completeness(
    requirements: List[RequiredDocument],
    present_doc_types: Iterable[DocType],
) -> CompletenessResult:
    """Compare requirements against the document types on a box.

    Only required entries can be missing; every satisfied entry, required or
    not, is reported as completed.
    """
    present = set(present_doc_types)
    missing = [r for r in requirements if r.required and not is_requirement_satisfied(r, present)]
    completed = [r for r in requirements if is_requirement_satisfied(r, present)]
    return CompletenessResult(is_complete=not missing, missing=missing, completed=completed)
