"""Tests for the box validation engine."""

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from app.models.enums import BoxStatus, DocType, ExpenseType, Severity, NO_CASH_RECEIPT
from app.rules.validation import ValidationConfig, filter_dismissed, to_decimal, validate_box
from app.schemas.box import BoxSummary

NOW = datetime(2026, 1, 16, 9, 0)
CONFIG = ValidationConfig()


def _validate(box, **kwargs):
    kwargs.setdefault("now", NOW)
    kwargs.setdefault("config", CONFIG)
    return validate_box(box, **kwargs)


def _issue_ids(result):
    return [issue.id for issue in result.issues]


@pytest.fixture
def clean_docs(make_doc):
    return [
        make_doc(DocType.TAX_INVOICE, amount=Decimal("1070.00")),
        make_doc(DocType.SLIP_TRANSFER),
    ]


def test_clean_box_has_no_issues(make_box, clean_docs):
    result = _validate(make_box(documents=clean_docs))
    assert result.issues == []
    assert result.is_valid
    assert not result.has_warnings


def test_missing_tax_invoice_is_an_error(make_box, make_doc):
    result = _validate(make_box(documents=[make_doc(DocType.SLIP_TRANSFER)]))
    issue = next(i for i in result.issues if i.id == "missing-tax-invoice")
    assert issue.severity == Severity.ERROR
    assert issue.code == "MISSING_TAX_INVOICE"
    assert not result.is_valid
    assert result.summary.errors == 1


def test_missing_payment_proof_is_a_warning(make_box, make_doc):
    result = _validate(make_box(documents=[make_doc(DocType.TAX_INVOICE)]))
    issue = next(i for i in result.issues if i.id == "missing-payment-proof")
    assert issue.severity == Severity.WARNING
    assert result.is_valid
    assert result.has_warnings


def test_confirmed_no_cash_receipt_is_not_missing(make_box, make_doc):
    box = make_box(
        expense_type=ExpenseType.NO_VAT,
        has_vat=False,
        vat_amount=Decimal("0"),
        no_receipt_reason=NO_CASH_RECEIPT,
        documents=[make_doc(DocType.SLIP_TRANSFER)],
    )
    assert "missing-cash-receipt" not in _issue_ids(_validate(box))


def test_other_no_receipt_reason_skips_missing_documents(make_box):
    box = make_box(no_receipt_reason="ONLINE_PURCHASE")
    assert not any(i.startswith("missing-") for i in _issue_ids(_validate(box)))


def test_paid_without_slip(make_box, make_doc):
    box = make_box(paid_amount=Decimal("1070.00"), documents=[make_doc(DocType.TAX_INVOICE, amount=Decimal("1070.00"))])
    issue = next(i for i in _validate(box).issues if i.id == "missing-slip")
    assert issue.severity == Severity.INFO


def test_document_amount_mismatch(make_box, make_doc):
    invoice = make_doc(DocType.TAX_INVOICE, amount=Decimal("1200.00"))
    result = _validate(make_box(documents=[invoice, make_doc(DocType.SLIP_TRANSFER)]))
    assert f"doc-amount-mismatch-{invoice.id}" in _issue_ids(result)


def test_document_amount_within_tolerance(make_box, make_doc):
    invoice = make_doc(DocType.TAX_INVOICE, amount=Decimal("1070.80"))
    result = _validate(make_box(documents=[invoice, make_doc(DocType.SLIP_TRANSFER)]))
    assert result.issues == []


def test_ai_amount_mismatch_per_document(make_box, make_doc):
    invoice = make_doc(DocType.TAX_INVOICE, amount=Decimal("1070.00"), ai_extracted={"amount": "1,700.00"})
    result = _validate(make_box(documents=[invoice, make_doc(DocType.SLIP_TRANSFER)]))
    assert _issue_ids(result) == [f"ai-amount-mismatch-{invoice.id}"]


def test_slip_short_by_withholding_tax(make_box, make_doc):
    slip = make_doc(DocType.SLIP_TRANSFER, ai_extracted={"amount": 1040.0})
    box = make_box(
        has_wht=True,
        wht_rate=Decimal("3"),
        documents=[make_doc(DocType.TAX_INVOICE, amount=Decimal("1070.00")), make_doc(DocType.WHT_SENT), slip],
    )
    ids = _issue_ids(_validate(box))
    assert "amount-wht-mismatch" in ids
    assert "amount-general-mismatch" not in ids

    box = make_box(
        has_wht=True,
        wht_rate=Decimal("3"),
        wht_amount=Decimal("30.00"),
        documents=[make_doc(DocType.TAX_INVOICE, amount=Decimal("1070.00")), make_doc(DocType.WHT_SENT), slip],
    )
    assert _validate(box).issues == []


def test_unusual_vat_rate(make_box, clean_docs):
    box = make_box(vat_amount=Decimal("100.00"), documents=clean_docs)
    assert "vat-rate-unusual" in _issue_ids(_validate(box))


def test_vat_rules_only_for_standard_expenses(make_box, clean_docs):
    box = make_box(expense_type=ExpenseType.FOREIGN, has_vat=False, vat_amount=Decimal("0"), documents=clean_docs)
    ids = _issue_ids(_validate(box))
    assert "vat-missing" not in ids
    assert "vat-rate-unusual" not in ids


def test_wht_rate_missing(make_box, clean_docs):
    box = make_box(has_wht=True, documents=clean_docs)
    assert "wht-rate-missing" in _issue_ids(_validate(box))


def test_wht_amount_mismatch(make_box, clean_docs):
    box = make_box(has_wht=True, wht_rate=Decimal("3"), wht_amount=Decimal("50.00"), documents=clean_docs)
    assert "wht-amount-mismatch" in _issue_ids(_validate(box))


def test_vat_box_requires_contact_tax_id(make_box, clean_docs):
    box = make_box(contact=None, contact_id=None, documents=clean_docs)
    issue = next(i for i in _validate(box).issues if i.id == "contact-taxid-required")
    assert issue.severity == Severity.WARNING
    assert issue.can_dismiss


def test_tax_id_mismatch(make_box, make_doc):
    invoice = make_doc(DocType.TAX_INVOICE, amount=Decimal("1070.00"), ai_extracted={"tax_id": "0-1055-59999-99-9"})
    result = _validate(make_box(documents=[invoice, make_doc(DocType.SLIP_TRANSFER)]))
    assert "taxid-mismatch" in _issue_ids(result)


def test_stale_draft(make_box, clean_docs):
    created = NOW - timedelta(days=10)
    box = make_box(status=BoxStatus.DRAFT, created_at=created, documents=clean_docs)
    assert _issue_ids(_validate(box)) == ["stale-draft"]

    box = make_box(status=BoxStatus.DRAFT, created_at=NOW - timedelta(days=2), documents=clean_docs)
    assert _validate(box).issues == []

    box = make_box(status=BoxStatus.PENDING, created_at=created, documents=clean_docs)
    assert _validate(box).issues == []


def _other(box, **fields):
    data = box.model_dump(include=set(BoxSummary.model_fields))
    data.update(id="box-other", box_number="EXP-202601-0002")
    data.update(fields)
    return BoxSummary(**data)


def test_possible_duplicate_within_window(make_box, clean_docs):
    box = make_box(documents=clean_docs)
    other = _other(box, box_date=box.box_date + timedelta(days=2))
    result = _validate(box, other_boxes=[other])
    assert _issue_ids(result) == ["possible-duplicate-box-other"]


def test_no_duplicate_outside_window(make_box, clean_docs):
    box = make_box(documents=clean_docs)
    other = _other(box, box_date=box.box_date + timedelta(days=10))
    assert _validate(box, other_boxes=[other]).issues == []


def test_box_is_not_its_own_duplicate(make_box, clean_docs):
    box = make_box(documents=clean_docs)
    assert _validate(box, other_boxes=[_other(box, id=box.id)]).issues == []


def test_filter_dismissed(make_box, make_doc):
    box = make_box(status=BoxStatus.DRAFT, created_at=NOW - timedelta(days=30), documents=[make_doc(DocType.SLIP_TRANSFER)])
    result = _validate(box)
    assert {"stale-draft", "missing-tax-invoice"} <= set(_issue_ids(result))

    filtered = filter_dismissed(result, ["stale-draft", "missing-tax-invoice"])
    assert "stale-draft" not in _issue_ids(filtered)
    # errors cannot be dismissed
    assert "missing-tax-invoice" in _issue_ids(filtered)
    assert filtered.summary.warnings == result.summary.warnings - 1


def test_to_decimal():
    assert to_decimal("1,070.50") == Decimal("1070.50")
    assert to_decimal(12) == Decimal("12")
    assert to_decimal("n/a") is None
    assert to_decimal("NaN") is None
    assert to_decimal(True) is None
    assert to_decimal(None) is None


def test_config_from_settings():
    config = ValidationConfig.from_settings()
    assert config.stale_draft_days == 7
    assert config.vat_rate == Decimal("7")
    assert config.duplicate_window_days == 3
