"""Token amounts — raw on-chain integers tagged with their token's decimals.

All monetary values use Decimal for display. Raw and human-scaled values
are never mixed: arithmetic is only defined between amounts of the same
precision.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class TokenAmount:
    """An amount in the smallest unit of a token, plus the token's decimals."""
    raw: int
    decimals: int

    @property
    def value(self) -> Decimal:
        """Human-scaled amount, e.g. 1.5 for raw 1500000000000000000 at 18 decimals."""
        return Decimal(self.raw).scaleb(-self.decimals)

    def __add__(self, other: "TokenAmount") -> "TokenAmount":
        if not isinstance(other, TokenAmount):
            return NotImplemented
        if other.decimals != self.decimals:
            raise ValueError(
                f"Cannot add amounts with different precision: "
                f"{self.decimals} vs {other.decimals} decimals"
            )
        return TokenAmount(raw=self.raw + other.raw, decimals=self.decimals)

    def __str__(self) -> str:
        return str(self.value)
