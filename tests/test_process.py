"""Tests for the process timeline."""

from app.models.enums import BoxType, BoxStatus, DocType, ExpenseType, StepStatus
from app.rules.process import (
    STEP_VAT_RECEIVED,
    build_process_context,
    calculate_process_status,
    calculate_progress,
    get_current_step,
    get_process_steps,
)


def _statuses(states):
    return {state.id: state.status for state in states}


def _steps_for(box):
    return get_process_steps(box.box_type, box.expense_type, box.has_vat, box.has_wht)


def test_expense_step_order():
    steps = get_process_steps(BoxType.EXPENSE, ExpenseType.NO_VAT, has_vat=False, has_wht=True)
    assert [s.id for s in steps] == ["create", "prepare", "cashReceipt", "submit", "whtSent", "review", "complete"]


def test_income_and_adjustment_step_order():
    income = get_process_steps(BoxType.INCOME, None, has_wht=True)
    assert [s.id for s in income] == ["create", "invoice", "receive", "whtReceived", "review", "complete"]
    adjustment = get_process_steps(BoxType.ADJUSTMENT, None)
    assert [s.id for s in adjustment] == ["create", "document", "submit", "review", "complete"]


def test_vat_step_absent_without_vat():
    steps = get_process_steps(BoxType.EXPENSE, ExpenseType.STANDARD, has_vat=False)
    assert "vatReceived" not in [s.id for s in steps]


def test_draft_box(make_box):
    box = make_box(status=BoxStatus.DRAFT)
    steps = _steps_for(box)
    ctx = build_process_context(box)
    states = calculate_process_status(steps, ctx)

    assert _statuses(states) == {
        "create": StepStatus.COMPLETED,
        "prepare": StepStatus.CURRENT,
        "submit": StepStatus.PENDING,
        "vatReceived": StepStatus.PENDING,
        "review": StepStatus.PENDING,
        "complete": StepStatus.PENDING,
    }
    assert calculate_progress(steps, ctx) == 17


def test_single_current_step(make_box):
    box = make_box(status=BoxStatus.SUBMITTED)
    states = calculate_process_status(_steps_for(box), build_process_context(box))
    assert [s.status for s in states].count(StepStatus.CURRENT) == 1


def test_submitted_box_waits_for_tax_invoice(make_box):
    box = make_box(status=BoxStatus.SUBMITTED)
    steps = _steps_for(box)
    ctx = build_process_context(box)
    assert get_current_step(steps, ctx).id == "vatReceived"


def test_submitted_box_with_tax_invoice(make_box, make_doc):
    box = make_box(status=BoxStatus.SUBMITTED, documents=[make_doc(DocType.TAX_INVOICE)])
    steps = _steps_for(box)
    ctx = build_process_context(box)
    assert get_current_step(steps, ctx).id == "review"
    assert calculate_progress(steps, ctx) == 67


def test_completed_box(make_box, make_doc):
    box = make_box(status=BoxStatus.COMPLETED, documents=[make_doc(DocType.TAX_INVOICE)])
    steps = _steps_for(box)
    ctx = build_process_context(box)
    assert get_current_step(steps, ctx) is None
    assert calculate_progress(steps, ctx) == 100


def test_skipped_steps_excluded_from_progress(make_box):
    box = make_box(status=BoxStatus.DRAFT, has_vat=False)
    # Steps built for a VAT box, evaluated against a box without VAT
    steps = get_process_steps(box.box_type, box.expense_type, has_vat=True)
    ctx = build_process_context(box)
    states = calculate_process_status(steps, ctx)
    assert _statuses(states)["vatReceived"] == StepStatus.SKIPPED
    # create done out of five active steps
    assert calculate_progress(steps, ctx) == 20


def test_only_skipped_steps_is_complete(make_box):
    box = make_box(has_vat=False)
    assert calculate_progress([STEP_VAT_RECEIVED], build_process_context(box)) == 100


def test_status_calculation_is_idempotent(make_box, make_doc):
    box = make_box(has_wht=True, documents=[make_doc(DocType.WHT_SENT)])
    steps = _steps_for(box)
    ctx = build_process_context(box)
    assert calculate_process_status(steps, ctx) == calculate_process_status(steps, ctx)
    assert calculate_progress(steps, ctx) == calculate_progress(steps, ctx)


def test_wht_step_needs_certificate_and_sent_flag(make_box, make_doc):
    docs = [make_doc(DocType.TAX_INVOICE), make_doc(DocType.WHT_SENT)]
    box = make_box(has_wht=True, documents=docs)
    states = calculate_process_status(_steps_for(box), build_process_context(box))
    assert _statuses(states)["whtSent"] == StepStatus.CURRENT

    box = make_box(has_wht=True, wht_sent=True, documents=docs)
    states = calculate_process_status(_steps_for(box), build_process_context(box))
    assert _statuses(states)["whtSent"] == StepStatus.COMPLETED
