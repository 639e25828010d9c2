"""Share computation for new bills.

All amounts are integer minor units. Every split type ends with shares that sum
exactly to the bill total: once the requested shares are accepted, any residual
left by rounding is absorbed by the first participant in insertion order.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal

from sharethebill.constants import AMOUNT_EPSILON, PERCENT_EPSILON
from sharethebill.errors import ValidationError
from sharethebill.models import format_amount, to_cents
from sharethebill.models.bill import ParticipantShare, SplitType

logger = logging.getLogger(__name__)


def split_equal(total: int, count: int) -> list[int]:
    """Split ``total`` into ``count`` shares: 10000 / 3 -> [3334, 3333, 3333]."""
    if count <= 0:
        raise ValidationError("At least one participant is required")
    base = total // count
    remainder = total - base * count
    return [base + remainder] + [base] * (count - 1)


def split_custom(total: int, amounts: list[int]) -> list[int]:
    if any(amount < 0 for amount in amounts):
        raise ValidationError("Custom amounts must not be negative")
    declared = sum(amounts)
    if abs(declared - total) > AMOUNT_EPSILON:
        raise ValidationError(
            f"Split amounts ({format_amount(declared)}) don't match total amount ({format_amount(total)})"
        )
    return _absorb_residual(total, amounts)


def split_percentage(total: int, percentages: list[Decimal]) -> list[int]:
    if any(pct < 0 for pct in percentages):
        raise ValidationError("Percentages must not be negative")
    declared = sum(percentages, Decimal("0"))
    if abs(declared - 100) > PERCENT_EPSILON:
        raise ValidationError(f"Percentages add up to {declared}, expected 100")
    amounts = [
        int((Decimal(total) * pct / 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)) for pct in percentages
    ]
    return _absorb_residual(total, amounts)


def _absorb_residual(total: int, amounts: list[int]) -> list[int]:
    residual = total - sum(amounts)
    if residual == 0:
        return amounts
    first = amounts[0] + residual
    if first < 0:
        raise ValidationError("Rounding residual cannot be assigned to the first participant")
    logger.debug("Assigning rounding residual %d to first participant", residual)
    return [first] + amounts[1:]


def compute_shares(total: int, split_type: SplitType, shares: list[ParticipantShare]) -> list[int]:
    """Return one amount per entry of ``shares``, in the same order."""
    if not shares:
        raise ValidationError("At least one participant is required")
    fids = [share.fid for share in shares]
    if len(set(fids)) != len(fids):
        raise ValidationError("Participants must be unique")

    if split_type == SplitType.EQUAL:
        return split_equal(total, len(shares))

    if split_type == SplitType.CUSTOM:
        missing = [share.fid for share in shares if share.amount is None]
        if missing:
            raise ValidationError(f"Custom split needs an amount for every participant (missing: {missing})")
        try:
            amounts = [to_cents(share.amount) for share in shares]
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        return split_custom(total, amounts)

    if split_type == SplitType.PERCENTAGE:
        missing = [share.fid for share in shares if share.percentage is None]
        if missing:
            raise ValidationError(f"Percentage split needs a percentage for every participant (missing: {missing})")
        return split_percentage(total, [Decimal(share.percentage) for share in shares])

    raise ValidationError(f"Unsupported split type: {split_type}")
