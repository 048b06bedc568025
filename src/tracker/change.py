"""24-hour change against the reference (previous close) price."""

from dataclasses import asdict, dataclass
from typing import Any

from src.shared.utils import is_valid_price, round2
from src.storage.schema import StoredDailyPrice


@dataclass(frozen=True)
class PriceChange:
    """Change since the reference price.

    ``has_reference`` separates "0.00 because nothing to compare against"
    from "0.00 because the price did not move".
    """

    change: float
    change_percent: float
    has_reference: bool
    reference_date: str | None = None
    reference_price: float | None = None

    @classmethod
    def neutral(cls) -> "PriceChange":
        return cls(change=0.0, change_percent=0.0, has_reference=False)

    @property
    def direction(self) -> str:
        """One of up, down or neutral."""
        if self.change > 0:
            return "up"
        if self.change < 0:
            return "down"
        return "neutral"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def compute_change(current_price: float, reference: StoredDailyPrice | None) -> PriceChange:
    """Absolute and percentage change from ``reference`` to ``current_price``.

    Never raises: a missing reference or an unusable price on either side
    yields a neutral change.
    """
    if reference is None:
        return PriceChange.neutral()
    if not is_valid_price(current_price) or not is_valid_price(reference.price_per_gram):
        return PriceChange.neutral()

    change = current_price - reference.price_per_gram
    change_percent = change / reference.price_per_gram * 100
    return PriceChange(
        change=round2(change),
        change_percent=round2(change_percent),
        has_reference=True,
        reference_date=reference.date,
        reference_price=reference.price_per_gram,
    )
