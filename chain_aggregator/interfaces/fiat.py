"""Fiat valuation protocol."""
from decimal import Decimal
from typing import Protocol, Sequence

from ..models import Coin


class FiatValuesAPI(Protocol):
    """Values coin amounts in a fiat currency."""

    async def calculate_fiat_values(
        self, coins: Sequence[Coin], currency: str
    ) -> dict[str, Decimal | None]: ...
