"""
Enum definitions for database models
"""
import enum


class BoxType(str, enum.Enum):
    """Transaction direction of a box"""
    EXPENSE = "EXPENSE"
    INCOME = "INCOME"
    ADJUSTMENT = "ADJUSTMENT"    # CN/DN, refunds


class ExpenseType(str, enum.Enum):
    """Expense sub-type determining the required evidence"""
    STANDARD = "STANDARD"        # has tax invoice, VAT claimable
    NO_VAT = "NO_VAT"            # cash bill / vendor not VAT-registered
    PETTY_CASH = "PETTY_CASH"    # small cash expense
    FOREIGN = "FOREIGN"          # paid abroad, foreign invoice


class BoxStatus(str, enum.Enum):
    """Box workflow status"""
    DRAFT = "DRAFT"              # being prepared by the business
    SUBMITTED = "SUBMITTED"      # handed to accounting
    PENDING = "PENDING"          # under accounting review
    NEED_DOCS = "NEED_DOCS"      # accounting asked for more documents
    COMPLETED = "COMPLETED"      # booked


class PaymentStatus(str, enum.Enum):
    """Payment state of the underlying transaction"""
    UNPAID = "UNPAID"
    PARTIAL = "PARTIAL"
    PAID = "PAID"
    OVERPAID = "OVERPAID"
    REFUNDED = "REFUNDED"


class DocStatus(str, enum.Enum):
    """Documentation completeness derived from the checklist"""
    INCOMPLETE = "INCOMPLETE"
    COMPLETE = "COMPLETE"
    NA = "NA"                    # no documents expected


class DocType(str, enum.Enum):
    """Evidence document classification"""
    # Payment evidence
    SLIP_TRANSFER = "SLIP_TRANSFER"
    SLIP_CHEQUE = "SLIP_CHEQUE"
    BANK_STATEMENT = "BANK_STATEMENT"
    CREDIT_CARD_STATEMENT = "CREDIT_CARD_STATEMENT"
    ONLINE_RECEIPT = "ONLINE_RECEIPT"
    PETTY_CASH_VOUCHER = "PETTY_CASH_VOUCHER"
    # Expense / income documents
    TAX_INVOICE = "TAX_INVOICE"
    TAX_INVOICE_ABB = "TAX_INVOICE_ABB"    # abbreviated tax invoice
    RECEIPT = "RECEIPT"
    CASH_RECEIPT = "CASH_RECEIPT"
    INVOICE = "INVOICE"
    FOREIGN_INVOICE = "FOREIGN_INVOICE"
    CUSTOMS_FORM = "CUSTOMS_FORM"
    DELIVERY_NOTE = "DELIVERY_NOTE"
    # Adjustments
    CREDIT_NOTE = "CREDIT_NOTE"
    DEBIT_NOTE = "DEBIT_NOTE"
    REFUND_RECEIPT = "REFUND_RECEIPT"
    # Withholding tax certificates
    WHT_SENT = "WHT_SENT"            # issued by us to a vendor
    WHT_RECEIVED = "WHT_RECEIVED"
    WHT_INCOMING = "WHT_INCOMING"    # issued to us by a customer
    # Supporting
    CONTRACT = "CONTRACT"
    QUOTATION = "QUOTATION"
    PURCHASE_ORDER = "PURCHASE_ORDER"
    OTHER = "OTHER"


class MemberRole(str, enum.Enum):
    """Role of a user inside an organization"""
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    ACCOUNTING = "ACCOUNTING"
    STAFF = "STAFF"


class Severity(str, enum.Enum):
    """Validation issue severity"""
    ERROR = "error"          # blocks export readiness
    WARNING = "warning"      # advisory
    INFO = "info"            # suggestion


class StepStatus(str, enum.Enum):
    """Process step display state"""
    COMPLETED = "completed"
    CURRENT = "current"
    PENDING = "pending"
    SKIPPED = "skipped"


class ErrorKind(str, enum.Enum):
    """Rejected-precondition categories for mutations"""
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    INVALID_TRANSITION = "invalid_transition"
    REASON_REQUIRED = "reason_required"
    STALE_WRITE = "stale_write"
    CHECKLIST_BLOCKED = "checklist_blocked"
    UNKNOWN_ITEM = "unknown_item"


NO_CASH_RECEIPT = "NO_CASH_RECEIPT"
