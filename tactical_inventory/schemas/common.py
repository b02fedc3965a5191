"""Domain enums and shared schema helpers"""

from enum import Enum
from typing import Any


class Site(str, Enum):
    CEDIS = "CEDIS"
    ACUNA = "ACUÑA"
    NLD = "NLD"

    @classmethod
    def parse(cls, value: Any) -> "Site":
        """Accept enum members and loosely typed site names ("acuna" -> ACUÑA)"""
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().upper()
        if normalized == "ACUNA":
            normalized = cls.ACUNA.value
        return cls(normalized)


DISCARD = "Desecho"


class RecoveryDestination(str, Enum):
    CEDIS = "CEDIS"
    ACUNA = "ACUÑA"
    NLD = "NLD"
    DISCARD = "Desecho"

    @classmethod
    def parse(cls, value: Any) -> "RecoveryDestination":
        if isinstance(value, cls):
            return value
        if str(value).strip().lower() == DISCARD.lower():
            return cls.DISCARD
        return cls(Site.parse(value).value)

    @property
    def is_discard(self) -> bool:
        return self is RecoveryDestination.DISCARD

    def to_site(self) -> Site:
        if self.is_discard:
            raise ValueError("The discard sink is not a site")
        return Site(self.value)


class StockStatus(str, Enum):
    IN_STOCK = "En Stock"
    REORDER = "Reordenar"
    OUT_OF_STOCK = "Agotado"


def derive_status(total_on_hand: int, stock_min: int) -> StockStatus:
    """
    Status of a stock record from its total and reorder threshold

    OutOfStock at zero, Reorder at or below the threshold, InStock above it.
    """
    if total_on_hand <= 0:
        return StockStatus.OUT_OF_STOCK
    if total_on_hand <= stock_min:
        return StockStatus.REORDER
    return StockStatus.IN_STOCK


class DispatchStatus(str, Enum):
    PENDING = "Pendiente"
    APPROVED = "Aprobado"


class CyclicTaskStatus(str, Enum):
    PENDING = "Pendiente"
    COMPLETED = "Completado"


class OrderStatus(str, Enum):
    PENDING = "Pendiente"


SITE_VALUES = tuple(site.value for site in Site)
DESTINATION_VALUES = tuple(destination.value for destination in RecoveryDestination)


def sql_in_list(values) -> str:
    """Render a literal IN list for CHECK constraints"""
    return "(" + ", ".join(f"'{value}'" for value in values) + ")"
