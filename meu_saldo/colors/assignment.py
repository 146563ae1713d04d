"""
Category Color Assignment

Every category renders in the same color once it has been seen.
Colors are derived from a hash of the category name and cached; the user
may override any entry from the reports page.

DESIGN DECISION: The cache key is the lower-cased category name only.
The revenue/expense flag picks the hue range for a NEW entry but is not
part of the key, so a category cached as an expense keeps its expense color
when later queried as revenue.
"""

import math
import re

from meu_saldo.models.records import ColorCache, ColorCacheEntry


# Hue ranges [min, max) keep income and expense charts apart
REVENUE_HUE_RANGE = (100, 180)  # greens / cyans
EXPENSE_HUE_RANGE = (0, 60)     # reds / yellows

SATURATION = 70
LIGHTNESS = 50

_INT32_MAX = 2147483647
_HEX_PATTERN = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def _to_int32(value: int) -> int:
    """Wrap to 32 bits and reinterpret as signed."""
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def category_hash(name: str) -> int:
    """
    Polynomial rolling hash (base 31) over UTF-16 code units.

    hash = code + ((hash << 5) - hash), with 32-bit signed overflow.
    """
    encoded = name.encode("utf-16-le")
    hash_value = 0
    for i in range(0, len(encoded), 2):
        code = encoded[i] | (encoded[i + 1] << 8)
        hash_value = _to_int32(code + _to_int32((hash_value << 5) - hash_value))
    return hash_value


def generated_color(name: str, is_revenue: bool) -> str:
    """Deterministic HSL color for a category that has no cache entry."""
    normalized = abs(category_hash(name)) / _INT32_MAX
    min_hue, max_hue = REVENUE_HUE_RANGE if is_revenue else EXPENSE_HUE_RANGE
    hue_range = max_hue - min_hue
    # abs(-2**31) normalizes slightly above 1; keep the range half-open
    hue = min(math.floor(normalized * hue_range), hue_range - 1) + min_hue
    return f"hsl({hue % 360}, {SATURATION}%, {LIGHTNESS}%)"


def color_for(category_name: str, is_revenue_category: bool, cache: ColorCache) -> str:
    """
    Get the display color of a category, populating the cache on a miss.

    A cached color is returned unconditionally.
    """
    cache_key = category_name.lower()

    entry = cache.get(cache_key)
    if entry is not None:
        return entry.color

    color = generated_color(category_name, is_revenue_category)
    cache[cache_key] = ColorCacheEntry(color=color, is_custom_override=False)
    return color


def set_custom_colors(cache: ColorCache, colors: list[tuple[str, str]]) -> None:
    """Store user-picked hex colors as custom HSL overrides."""
    for category, hex_color in colors:
        cache[category.lower()] = ColorCacheEntry(
            color=hex_to_hsl(hex_color),
            is_custom_override=True,
        )


# =============================================================================
# HSL <-> HEX
# =============================================================================

def hsl_to_rgb(h: float, s: float, l: float) -> tuple[int, int, int]:
    """Convert HSL (degrees, percent, percent) to 8-bit RGB."""
    s /= 100
    l /= 100
    a = s * min(l, 1 - l)

    def channel(n: int) -> int:
        k = (n + h / 30) % 12
        value = l - a * max(-1, min(k - 3, 9 - k, 1))
        return _round_half_up(255 * value)

    return channel(0), channel(8), channel(4)


def rgb_to_hsl(r: int, g: int, b: int) -> tuple[int, int, int]:
    """Convert 8-bit RGB to rounded HSL (degrees, percent, percent)."""
    r_, g_, b_ = r / 255, g / 255, b / 255
    high = max(r_, g_, b_)
    low = min(r_, g_, b_)
    l = (high + low) / 2

    if high == low:
        h = s = 0.0  # achromatic
    else:
        d = high - low
        s = d / (2 - high - low) if l > 0.5 else d / (high + low)
        if high == r_:
            h = (g_ - b_) / d + (6 if g_ < b_ else 0)
        elif high == g_:
            h = (b_ - r_) / d + 2
        else:
            h = (r_ - g_) / d + 4
        h /= 6

    return _round_half_up(h * 360), _round_half_up(s * 100), _round_half_up(l * 100)


def hsl_to_hex(hsl_string: str) -> str:
    """Convert "hsl(h, s%, l%)" to "#rrggbb"; "#000000" if unparseable."""
    parts = re.findall(r"\d+", hsl_string)
    if len(parts) < 3:
        return "#000000"

    h, s, l = (int(part) for part in parts[:3])
    r, g, b = hsl_to_rgb(h, s, l)
    return f"#{r:02x}{g:02x}{b:02x}"


def hex_to_hsl(hex_color: str) -> str:
    """
    Convert "#rrggbb" or "#rgb" to "hsl(h, s%, l%)".

    Anything else converts as black, like the color picker's default.
    """
    r = g = b = 0
    if _HEX_PATTERN.match(hex_color):
        digits = hex_color[1:]
        if len(digits) == 3:
            digits = "".join(ch * 2 for ch in digits)
        r, g, b = (int(digits[i:i + 2], 16) for i in (0, 2, 4))

    h, s, l = rgb_to_hsl(r, g, b)
    return f"hsl({h}, {s}%, {l}%)"
