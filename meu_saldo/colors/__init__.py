"""Category color package."""

from meu_saldo.colors.assignment import (
    EXPENSE_HUE_RANGE,
    REVENUE_HUE_RANGE,
    category_hash,
    color_for,
    generated_color,
    hex_to_hsl,
    hsl_to_hex,
    set_custom_colors,
)

__all__ = [
    "EXPENSE_HUE_RANGE",
    "REVENUE_HUE_RANGE",
    "category_hash",
    "color_for",
    "generated_color",
    "hex_to_hsl",
    "hsl_to_hex",
    "set_custom_colors",
]
