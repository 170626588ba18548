"""Pytest configuration and fixtures."""

import itertools
import os
import sys
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Must be set before the engine is created on import
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test_boxflow.db")

from main import app  # noqa: E402
from app.core.database import engine, Base  # noqa: E402
from app.models.enums import BoxType, ExpenseType  # noqa: E402
from app.schemas.box import BoxSnapshot  # noqa: E402
from app.schemas.document import DocumentSnapshot  # noqa: E402
from app.schemas.organization import ContactResponse  # noqa: E402

VENDOR_TAX_ID = "0105551234567"


@pytest_asyncio.fixture
async def client():
    """HTTP client against a freshly created schema."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def org(client):
    """Organization with one member per role and a VAT-registered vendor.

    Returns a dict with the organization id, request headers per role and
    the vendor contact id.
    """
    response = await client.post(
        "/organizations",
        json={"name": "Acme Trading", "slug": "acme", "owner_email": "owner@acme.co.th"},
        headers={"X-User-Id": "owner-1"},
    )
    assert response.status_code == 201
    org_id = response.json()["id"]

    headers = {
        role: {"X-User-Id": f"{role}-1", "X-Organization-Id": org_id}
        for role in ("owner", "admin", "accounting", "staff")
    }

    for role in ("admin", "accounting", "staff"):
        response = await client.post(
            f"/organizations/{org_id}/members",
            json={"user_id": f"{role}-1", "email": f"{role}@acme.co.th", "role": role.upper()},
            headers=headers["owner"],
        )
        assert response.status_code == 201

    response = await client.post(
        f"/organizations/{org_id}/contacts",
        json={"name": "Office Supplies Ltd.", "tax_id": VENDOR_TAX_ID},
        headers=headers["accounting"],
    )
    assert response.status_code == 201

    return {"id": org_id, "headers": headers, "contact_id": response.json()["id"]}


_ids = itertools.count(1)


@pytest.fixture
def make_doc():
    """Factory for document snapshots used by the rule tests."""
    def _make(doc_type, **fields):
        fields.setdefault("id", f"doc-{next(_ids)}")
        return DocumentSnapshot(doc_type=doc_type, **fields)
    return _make


@pytest.fixture
def make_box():
    """Factory for box snapshots used by the rule tests.

    Defaults to a submitted STANDARD expense of 1,070.00 (1,000.00 + 7% VAT)
    from a VAT-registered vendor, with no documents.
    """
    def _make(documents=(), contact="default", **fields):
        data = {
            "id": f"box-{next(_ids)}",
            "organization_id": "org-1",
            "box_number": "EXP-202601-0001",
            "box_type": BoxType.EXPENSE,
            "expense_type": ExpenseType.STANDARD,
            "status": "SUBMITTED",
            "has_vat": True,
            "box_date": date(2026, 1, 15),
            "created_at": datetime(2026, 1, 15, 9, 0),
            "total_amount": Decimal("1070.00"),
            "subtotal_amount": Decimal("1000.00"),
            "vat_amount": Decimal("70.00"),
            "contact_id": "contact-1",
        }
        if contact == "default":
            contact = ContactResponse(id="contact-1", name="Office Supplies Ltd.", tax_id=VENDOR_TAX_ID)
        data.update(fields)
        return BoxSnapshot(contact=contact, documents=list(documents), **data)
    return _make
