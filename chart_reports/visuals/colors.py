"""Chart palette and CSS color helpers."""

from __future__ import annotations

import colorsys
import re

PALETTE: tuple[str, ...] = (
    "rgba(59, 130, 246, 0.8)",
    "rgba(16, 185, 129, 0.8)",
    "rgba(245, 101, 101, 0.8)",
    "rgba(251, 146, 60, 0.8)",
    "rgba(139, 92, 246, 0.8)",
)

_RGBA_RE = re.compile(
    r"^rgba?\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*(?:,\s*([0-9]*\.?[0-9]+)\s*)?\)$"
)


def palette_color(index: int) -> str:
    """Color for category ``index``; the palette repeats with period len(PALETTE)."""
    return PALETTE[index % len(PALETTE)]


def palette_colors(count: int) -> list[str]:
    return [palette_color(i) for i in range(count)]


def parse_rgba(color: str) -> tuple[int, int, int, float]:
    match = _RGBA_RE.match(color.strip())
    if not match:
        raise ValueError(f"Not an rgb()/rgba() color: {color!r}")
    r, g, b, a = match.groups()
    return int(r), int(g), int(b), float(a) if a is not None else 1.0


def with_full_opacity(color: str) -> str:
    """Same hue with alpha forced to 1."""
    r, g, b, _ = parse_rgba(color)
    return f"rgba({r}, {g}, {b}, 1)"


def to_mpl_color(color: str) -> str | tuple[float, float, float, float]:
    """Convert a CSS rgba() string to a matplotlib RGBA tuple.

    Anything that is not rgb()/rgba() (hex, named colors) is passed through.
    """
    try:
        r, g, b, a = parse_rgba(color)
    except ValueError:
        return color
    return (r / 255, g / 255, b / 255, a)


def hsl_color(hue: float, saturation: float = 0.7, lightness: float = 0.5) -> tuple[float, float, float]:
    r, g, b = colorsys.hls_to_rgb((hue % 360) / 360, lightness, saturation)
    return (r, g, b)
