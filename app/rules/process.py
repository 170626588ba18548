"""
Process timeline and progress calculation.

Steps are evaluated in order against a ProcessContext. There is a single
cursor: the first step that is neither skipped nor complete is current, and
everything after it is pending.
"""
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple
from app.models.enums import BoxType, BoxStatus, ExpenseType, StepStatus
from app.rules.checklist import get_box_checklist
from app.schemas.box import BoxSnapshot
from app.schemas.checklist import ChecklistItem
from app.schemas.process import StepState


@dataclass(frozen=True)
class ProcessContext:
    box_status: BoxStatus
    expense_type: Optional[ExpenseType]
    has_vat: bool
    has_wht: bool
    is_paid: bool
    wht_sent: bool
    checklist: Tuple[ChecklistItem, ...]

    def item_complete(self, item_id: str) -> bool:
        return any(item.id == item_id and item.completed for item in self.checklist)


Predicate = Callable[[ProcessContext], bool]


@dataclass(frozen=True)
class ProcessStep:
    id: str
    label: str
    description: str
    is_complete: Predicate
    skip_if: Optional[Predicate] = None


def build_process_context(box: BoxSnapshot, checklist: Optional[List[ChecklistItem]] = None) -> ProcessContext:
    if checklist is None:
        checklist = get_box_checklist(box)
    return ProcessContext(
        box_status=box.status,
        expense_type=box.expense_type,
        has_vat=box.has_vat,
        has_wht=box.has_wht,
        is_paid=box.is_paid,
        wht_sent=box.wht_sent,
        checklist=tuple(checklist),
    )


def _is_submitted(ctx: ProcessContext) -> bool:
    return ctx.box_status != BoxStatus.DRAFT


def _is_completed(ctx: ProcessContext) -> bool:
    return ctx.box_status == BoxStatus.COMPLETED


STEP_CREATE = ProcessStep(
    id="create",
    label="Create box",
    description="Basic details entered",
    is_complete=lambda ctx: True,
)

STEP_PREPARE = ProcessStep(
    id="prepare",
    label="Prepare documents",
    description="Upload invoices and payment slips",
    is_complete=_is_submitted,
)

STEP_SUBMIT = ProcessStep(
    id="submit",
    label="Submit to accounting",
    description="Send the box for review",
    is_complete=_is_submitted,
)

STEP_REVIEW = ProcessStep(
    id="review",
    label="Review",
    description="Accounting is checking the box",
    is_complete=_is_completed,
)

STEP_COMPLETE = ProcessStep(
    id="complete",
    label="Completed",
    description="Booked in the ledger",
    is_complete=_is_completed,
)

STEP_CASH_RECEIPT = ProcessStep(
    id="cashReceipt",
    label="Cash receipt",
    description="Upload the cash bill or confirm there is none",
    is_complete=lambda ctx: ctx.item_complete("hasCashReceipt"),
)

STEP_FOREIGN_INVOICE = ProcessStep(
    id="foreignInvoice",
    label="Foreign invoice",
    description="Upload the overseas invoice",
    is_complete=lambda ctx: ctx.item_complete("hasForeignInvoice"),
)

STEP_PETTY_CASH_CONFIRM = ProcessStep(
    id="pettyCashConfirm",
    label="Confirm cash payment",
    description="Confirm the petty cash was paid out",
    is_complete=lambda ctx: ctx.is_paid,
)

STEP_VAT_RECEIVED = ProcessStep(
    id="vatReceived",
    label="Tax invoice",
    description="Tax invoice received",
    is_complete=lambda ctx: ctx.item_complete("hasTaxInvoice"),
    skip_if=lambda ctx: not ctx.has_vat,
)

STEP_WHT_SENT = ProcessStep(
    id="whtSent",
    label="Send WHT",
    description="Issue and send the withholding tax certificate",
    is_complete=lambda ctx: ctx.item_complete("whtIssued") and ctx.item_complete("whtSent"),
    skip_if=lambda ctx: not ctx.has_wht,
)

STEP_INCOME_INVOICE = ProcessStep(
    id="invoice",
    label="Issue invoice",
    description="Issue the invoice or tax invoice",
    is_complete=lambda ctx: ctx.item_complete("hasInvoice"),
)

STEP_INCOME_RECEIVE = ProcessStep(
    id="receive",
    label="Receive payment",
    description="Confirm the payment was received",
    is_complete=lambda ctx: ctx.is_paid,
)

STEP_WHT_RECEIVED = ProcessStep(
    id="whtReceived",
    label="Receive WHT",
    description="Withholding tax certificate received",
    is_complete=lambda ctx: ctx.item_complete("whtReceived"),
    skip_if=lambda ctx: not ctx.has_wht,
)

STEP_ADJUSTMENT_DOC = ProcessStep(
    id="document",
    label="Supporting document",
    description="Credit note, debit note or refund evidence",
    is_complete=lambda ctx: ctx.item_complete("hasDocument"),
)

EXPENSE_EVIDENCE_STEPS = {
    ExpenseType.NO_VAT: STEP_CASH_RECEIPT,
    ExpenseType.FOREIGN: STEP_FOREIGN_INVOICE,
    ExpenseType.PETTY_CASH: STEP_PETTY_CASH_CONFIRM,
}


def get_process_steps(
    box_type: BoxType,
    expense_type: Optional[ExpenseType],
    has_vat: bool = False,
    has_wht: bool = False,
) -> List[ProcessStep]:
    """Ordered steps for a box configuration"""
    if box_type == BoxType.INCOME:
        steps = [STEP_CREATE, STEP_INCOME_INVOICE, STEP_INCOME_RECEIVE]
        if has_wht:
            steps.append(STEP_WHT_RECEIVED)
        return steps + [STEP_REVIEW, STEP_COMPLETE]

    if box_type == BoxType.ADJUSTMENT:
        return [STEP_CREATE, STEP_ADJUSTMENT_DOC, STEP_SUBMIT, STEP_REVIEW, STEP_COMPLETE]

    steps = [STEP_CREATE, STEP_PREPARE]
    if expense_type in EXPENSE_EVIDENCE_STEPS:
        steps.append(EXPENSE_EVIDENCE_STEPS[expense_type])
    steps.append(STEP_SUBMIT)
    if has_vat:
        steps.append(STEP_VAT_RECEIVED)
    if has_wht:
        steps.append(STEP_WHT_SENT)
    return steps + [STEP_REVIEW, STEP_COMPLETE]


def calculate_process_status(steps: List[ProcessStep], ctx: ProcessContext) -> List[StepState]:
    """Assign completed/current/pending/skipped to each step"""
    states = []
    found_current = False

    for step in steps:
        if step.skip_if is not None and step.skip_if(ctx):
            status = StepStatus.SKIPPED
        elif step.is_complete(ctx):
            status = StepStatus.COMPLETED
        elif not found_current:
            status = StepStatus.CURRENT
            found_current = True
        else:
            status = StepStatus.PENDING
        states.append(StepState(id=step.id, label=step.label, description=step.description, status=status))

    return states


def get_current_step(steps: List[ProcessStep], ctx: ProcessContext) -> Optional[StepState]:
    for state in calculate_process_status(steps, ctx):
        if state.status == StepStatus.CURRENT:
            return state
    return None


def calculate_progress(steps: List[ProcessStep], ctx: ProcessContext) -> int:
    """Percent of non-skipped steps that are complete"""
    states = calculate_process_status(steps, ctx)
    active = [s for s in states if s.status != StepStatus.SKIPPED]
    if not active:
        return 100
    done = sum(1 for s in active if s.status == StepStatus.COMPLETED)
    return int(100 * done / len(active) + 0.5)
