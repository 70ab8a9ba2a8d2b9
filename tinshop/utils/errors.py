# utils/errors.py
"""
Domain errors the controllers let propagate to the UI.

- DomainError             base class; message is user-facing (toast/message box)
- ValidationFailure       bad operator input; nothing was changed
- ConfirmationRequired    a warning the operator must accept; nothing was changed.
                          Re-run the same call with confirmed=True to proceed.
    - StockIntegrityWarning   stock of one or more variants would go below zero
    - ZeroCostWarning         stock-in at a rate of zero
"""

from __future__ import annotations


class DomainError(Exception):
    """Domain-level error suitable for surfacing to the UI."""
    pass


class ValidationFailure(DomainError, ValueError):
    pass


class ConfirmationRequired(DomainError):
    pass


class StockIntegrityWarning(ConfirmationRequired):
    def __init__(self, shortages: list[dict]):
        # shortages: [{"group_id", "variant_id", "name", "stock_after"}]
        self.shortages = shortages
        names = ", ".join(
            f"{s['name']} ({s['stock_after']:g})" for s in shortages
        )
        super().__init__(f"Stock will go negative for: {names}. Continue anyway?")


class ZeroCostWarning(ConfirmationRequired):
    def __init__(self, product_name: str):
        self.product_name = product_name
        super().__init__(
            f"Purchase rate for {product_name} is 0. "
            "Zero-cost stock lowers the average cost. Continue anyway?"
        )
