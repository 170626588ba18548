"""Tests for duplicate box detection."""

from datetime import timedelta
from decimal import Decimal

import pytest
from pydantic import ValidationError

from app.core.config import Settings
from app.models.enums import BoxType, DocType
from app.rules.duplicates import amounts_match, find_checksum_duplicates, find_possible_duplicates

CHECKSUM = "a" * 64


def _other(box, **fields):
    data = {"id": "box-other", "box_number": "EXP-202601-0002"}
    data.update(fields)
    return box.model_copy(update=data)


def test_amounts_match_is_relative_and_symmetric():
    tolerance = Decimal("0.01")
    assert amounts_match(Decimal("1000"), Decimal("1009"), tolerance)
    assert amounts_match(Decimal("1009"), Decimal("1000"), tolerance)
    assert not amounts_match(Decimal("1000"), Decimal("1020"), tolerance)
    assert not amounts_match(Decimal("0"), Decimal("0"), tolerance)


@pytest.mark.parametrize("tolerance", ["1", "1.5", "-0.01"])
def test_duplicate_tolerance_must_be_a_fraction(tolerance):
    with pytest.raises(ValidationError):
        Settings(DUPLICATE_AMOUNT_TOLERANCE=Decimal(tolerance))


def test_two_days_apart_is_flagged(make_box):
    box = make_box()
    other = _other(box, box_date=box.box_date - timedelta(days=2))
    matches = find_possible_duplicates(box, [other])
    assert len(matches) == 1
    assert matches[0].box_id == "box-other"
    assert matches[0].similarity == 80
    assert matches[0].match_type == "similar"
    assert "2 days apart" in matches[0].reason

    mirrored = find_possible_duplicates(other, [box])
    assert [m.box_id for m in mirrored] == [box.id]
    assert mirrored[0].similarity == matches[0].similarity


def test_ten_days_apart_is_not_flagged(make_box):
    box = make_box()
    assert find_possible_duplicates(box, [_other(box, box_date=box.box_date + timedelta(days=10))]) == []


def test_similar_amount_scores_lower(make_box):
    box = make_box()
    matches = find_possible_duplicates(box, [_other(box, total_amount=Decimal("1075.00"))])
    assert matches[0].similarity == 90
    assert matches[0].reason.startswith("Similar amount")


@pytest.mark.parametrize("fields", [
    {"contact_id": "contact-2"},
    {"organization_id": "org-2"},
    {"box_type": BoxType.INCOME},
    {"total_amount": Decimal("2000.00")},
])
def test_not_a_duplicate(make_box, fields):
    box = make_box()
    assert find_possible_duplicates(box, [_other(box, **fields)]) == []


def test_counterparty_on_one_side_only(make_box):
    box = make_box(contact=None, contact_id=None)
    assert find_possible_duplicates(box, [_other(box, contact_id="contact-1")]) == []
    # no counterparty on either side still matches, with a lower score
    matches = find_possible_duplicates(box, [_other(box)])
    assert matches[0].similarity == 90


def test_box_itself_is_skipped(make_box):
    box = make_box()
    assert find_possible_duplicates(box, [box]) == []


def test_matches_sorted_by_similarity(make_box):
    box = make_box()
    far = _other(box, id="box-far", box_number="EXP-202601-0003", box_date=box.box_date + timedelta(days=3))
    near = _other(box, id="box-near", box_number="EXP-202601-0004")
    matches = find_possible_duplicates(box, [far, near])
    assert [m.box_id for m in matches] == ["box-near", "box-far"]


def test_checksum_duplicates(make_doc):
    documents = [make_doc(DocType.TAX_INVOICE, checksum=CHECKSUM), make_doc(DocType.SLIP_TRANSFER)]
    rows = [
        ("box-2", "EXP-202601-0002", CHECKSUM),
        ("box-2", "EXP-202601-0002", CHECKSUM),
        ("box-3", "EXP-202601-0003", "b" * 64),
    ]
    matches = find_checksum_duplicates(documents, rows)
    assert [(m.box_id, m.match_type, m.similarity) for m in matches] == [("box-2", "exact", 100)]


async def _create_box(client, org, box_date, amount="1070.00"):
    response = await client.post(
        "/boxes",
        json={
            "box_type": "EXPENSE",
            "box_date": box_date,
            "contact_id": org["contact_id"],
            "total_amount": amount,
        },
        headers=org["headers"]["staff"],
    )
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_duplicate_scan_endpoint(client, org):
    first = await _create_box(client, org, "2026-01-15")
    second = await _create_box(client, org, "2026-01-17")
    await _create_box(client, org, "2026-01-30")
    headers = org["headers"]["staff"]

    response = await client.get(f"/boxes/{second['id']}/duplicates", headers=headers)
    assert response.status_code == 200
    data = response.json()
    assert data["possible_duplicate"] is True
    assert [m["box_id"] for m in data["matches"]] == [first["id"]]
    assert data["matches"][0]["match_type"] == "similar"

    response = await client.get(f"/boxes/{second['id']}/validation", headers=headers)
    ids = [issue["id"] for issue in response.json()["issues"]]
    assert f"possible-duplicate-{first['id']}" in ids

    response = await client.get(
        f"/boxes/{second['id']}/validation",
        params={"dismissed": [f"possible-duplicate-{first['id']}"]},
        headers=headers,
    )
    ids = [issue["id"] for issue in response.json()["issues"]]
    assert f"possible-duplicate-{first['id']}" not in ids


@pytest.mark.asyncio
async def test_exact_duplicate_by_checksum(client, org):
    first = await _create_box(client, org, "2026-01-15")
    second = await _create_box(client, org, "2026-03-01", amount="500.00")
    headers = org["headers"]["staff"]
    document = {"doc_type": "TAX_INVOICE", "filename": "invoice.pdf", "checksum": CHECKSUM}

    for box in (first, second):
        response = await client.post(f"/boxes/{box['id']}/documents", json=document, headers=headers)
        assert response.status_code == 201

    response = await client.get(f"/boxes/{second['id']}/duplicates", headers=headers)
    matches = response.json()["matches"]
    assert len(matches) == 1
    assert matches[0]["box_id"] == first["id"]
    assert matches[0]["match_type"] == "exact"
    assert matches[0]["similarity"] == 100


@pytest.mark.asyncio
async def test_same_file_twice_in_one_box_is_rejected(client, org):
    box = await _create_box(client, org, "2026-01-15")
    headers = org["headers"]["staff"]
    document = {"doc_type": "SLIP_TRANSFER", "filename": "slip.jpg", "checksum": CHECKSUM}

    response = await client.post(f"/boxes/{box['id']}/documents", json=document, headers=headers)
    assert response.status_code == 201

    response = await client.post(f"/boxes/{box['id']}/documents", json=document, headers=headers)
    assert response.status_code == 409
    assert "already exists" in response.json()["detail"]
