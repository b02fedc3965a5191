"""
Stock Rules
Pure status derivation, new-first allocation and movement line validation
"""
from dataclasses import dataclass
from typing import Iterable, List

from tactical_inventory.core.exceptions import ValidationError
from tactical_inventory.schemas.common import derive_status  # noqa: F401  re-exported for the ledger services


@dataclass(frozen=True)
class Allocation:
    """How a dispatch quantity was split across the two pools"""
    from_new: int
    from_recovered: int
    shortfall: int = 0

    @property
    def allocated(self) -> int:
        return self.from_new + self.from_recovered


def allocate_new_first(quantity: int, stock_new: int, stock_recovered: int) -> Allocation:
    """
    Split ``quantity`` over the pools, draining new units before recovered ones

    Whatever neither pool can cover is reported as shortfall; pools are
    never driven below zero.
    """
    stock_new = max(stock_new, 0)
    stock_recovered = max(stock_recovered, 0)

    from_new = min(quantity, stock_new)
    remainder = quantity - from_new
    from_recovered = min(remainder, stock_recovered)
    return Allocation(
        from_new=from_new,
        from_recovered=from_recovered,
        shortfall=remainder - from_recovered,
    )


def total_items(lines: Iterable) -> int:
    """Sum of line quantities; movement totals are always recomputed with this"""
    return sum(line.quantity for line in lines)


def validate_lines(lines: List) -> None:
    """Reject empty movements, blank codes and non-positive quantities"""
    if not lines:
        raise ValidationError("At least one item line is required")
    for position, line in enumerate(lines, start=1):
        if not (line.code or "").strip():
            raise ValidationError(f"Line {position}: item code is required")
        if isinstance(line.quantity, bool) or not isinstance(line.quantity, int):
            raise ValidationError(f"Line {position}: quantity must be an integer")
        if line.quantity <= 0:
            raise ValidationError(f"Line {position}: quantity must be greater than zero")
