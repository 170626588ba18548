"""
Duplicate box detection.

A soft duplicate is another box in the same organization with nearly the
same total, the same counterparty and a box date within a few days. An exact
duplicate is a document whose file hash is already attached to another box.
"""
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple
from app.schemas.box import BoxSummary
from app.schemas.document import DocumentSnapshot
from app.schemas.validation import DuplicateMatch


def amounts_match(a: Decimal, b: Decimal, tolerance: Decimal) -> bool:
    """Relative comparison, symmetric in a and b"""
    largest = max(abs(a), abs(b))
    if largest == 0:
        return False
    return abs(a - b) <= largest * tolerance


def _similarity(box: BoxSummary, other: BoxSummary, days_apart: int) -> int:
    score = 100 - 10 * days_apart
    if box.total_amount != other.total_amount:
        score -= 10
    if not box.contact_id:
        score -= 10
    return max(score, 0)


def _reason(box: BoxSummary, other: BoxSummary, days_apart: int) -> str:
    amount = "Same amount" if box.total_amount == other.total_amount else "Similar amount"
    vendor = " and counterparty" if box.contact_id else ""
    when = "same day" if days_apart == 0 else f"{days_apart} day{'s' if days_apart > 1 else ''} apart"
    return f"{amount}{vendor}, {when} ({other.box_number})"


def find_possible_duplicates(
    box: BoxSummary,
    candidates: Iterable[BoxSummary],
    window_days: int = 3,
    amount_tolerance: Decimal = Decimal("0.01"),
) -> List[DuplicateMatch]:
    """Find other boxes that look like the same transaction.

    Boxes from other organizations and the box itself are ignored. When
    either box has a counterparty, both must have the same one.
    """
    matches = []
    for other in candidates:
        if other.id == box.id or other.organization_id != box.organization_id:
            continue
        if other.box_type != box.box_type:
            continue
        if (box.contact_id or other.contact_id) and box.contact_id != other.contact_id:
            continue
        if not amounts_match(box.total_amount, other.total_amount, amount_tolerance):
            continue
        days_apart = abs((box.box_date - other.box_date).days)
        if days_apart > window_days:
            continue
        matches.append(DuplicateMatch(
            box_id=other.id,
            box_number=other.box_number,
            similarity=_similarity(box, other, days_apart),
            reason=_reason(box, other, days_apart),
        ))

    matches.sort(key=lambda m: (-m.similarity, m.box_number))
    return matches


def find_checksum_duplicates(
    documents: Iterable[DocumentSnapshot],
    attached_elsewhere: Iterable[Tuple[str, str, Optional[str]]],
) -> List[DuplicateMatch]:
    """Match document hashes against (box_id, box_number, checksum) rows of other boxes"""
    checksums = {doc.checksum for doc in documents if doc.checksum}
    found: Dict[str, DuplicateMatch] = {}
    for box_id, box_number, checksum in attached_elsewhere:
        if checksum in checksums and box_id not in found:
            found[box_id] = DuplicateMatch(
                box_id=box_id,
                box_number=box_number,
                similarity=100,
                reason=f"Same file is already attached to {box_number}",
                match_type="exact",
            )
    return sorted(found.values(), key=lambda m: m.box_number)
