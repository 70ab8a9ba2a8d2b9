# tinshop/modules/inventory/costing.py
"""
Weighted-average cost per piece.

    new_avg = (stock * avg + incoming_total_cost) / (stock + incoming_pieces)

Only stock-in events move the average; sales, returns and deletions change
quantity alone.
"""

from __future__ import annotations

from ...utils.errors import ValidationFailure


def cost_per_piece(total_cost: float, pieces: int) -> float:
    if pieces <= 0:
        raise ValidationFailure("Incoming quantity must be at least one piece.")
    return float(total_cost) / pieces


def weighted_average_cost(
    current_stock: int,
    current_avg_cost: float,
    incoming_pieces: int,
    incoming_total_cost: float,
) -> float:
    """
    Average cost per piece after receiving `incoming_pieces` that cost
    `incoming_total_cost` in total.

    With nothing on hand (stock <= 0) the incoming cost per piece becomes the
    new average; a negative balance carries no cost to blend with.
    """
    if incoming_pieces <= 0:
        raise ValidationFailure("Incoming quantity must be at least one piece.")
    if incoming_total_cost < 0:
        raise ValidationFailure("Purchase cost cannot be negative.")

    if current_stock <= 0:
        return cost_per_piece(incoming_total_cost, incoming_pieces)

    current_value = current_stock * max(float(current_avg_cost or 0.0), 0.0)
    return (current_value + float(incoming_total_cost)) / (current_stock + incoming_pieces)
