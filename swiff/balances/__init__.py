"""Balance netting and debt simplification package."""

from swiff.balances.netting import (
    balance_with,
    compute_balances,
    suggest_settlement,
)
from swiff.balances.simplify import calculate_balances

__all__ = [
    "balance_with",
    "calculate_balances",
    "compute_balances",
    "suggest_settlement",
]
