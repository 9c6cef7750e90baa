"""
Color parsing for the ring overlay's color property.

Accepted inputs (all normalized to an RGBA tuple with 0-255 components):
- HEX: "#RRGGBB" or "#RRGGBBAA"
- CSV string: "200,200,200" or "(200, 200, 200, 128)" or "0.5,0.5,0.5"
- int sequence: [R, G, B] or [R, G, B, A], 0-255
- float sequence: [R, G, B] or [R, G, B, A], 0.0-1.0 (every component a float)
"""

import re
from typing import Tuple, Union, List, Optional

Color = Tuple[int, int, int, int]  # RGBA
ColorInput = Union[str, List, Tuple]

HEX_COLOR_PATTERN = re.compile(r'^#?([0-9a-fA-F]{6}|[0-9a-fA-F]{8})$')

CSV_COLOR_PATTERN = re.compile(
    r'^[\(\[]?\s*([0-9.]+)\s*,\s*([0-9.]+)\s*,\s*([0-9.]+)(?:\s*,\s*([0-9.]+))?\s*[\)\]]?$'
)


def normalize_color(color: Tuple[Union[int, float], ...]) -> Color:
    """
    Clamp a 3- or 4-component color into RGBA 0-255.

    Examples:
        >>> normalize_color((200, 200, 200))
        (200, 200, 200, 255)
        >>> normalize_color((1.0, 0.0, 0.0, 0.5))
        (255, 0, 0, 128)
    """
    if len(color) not in (3, 4):
        raise ValueError(f"Color must have 3 or 4 components, got {len(color)}")
    if any(isinstance(c, bool) or not isinstance(c, (int, float)) for c in color):
        raise ValueError(f"Color components must be numbers: {color!r}")

    is_float_color = (
        all(isinstance(c, float) for c in color) and
        all(0.0 <= c <= 1.0 for c in color)
    )
    if is_float_color:
        values = [int(round(c * 255)) for c in color]
    else:
        values = [int(c) for c in color]

    clamped = [max(0, min(255, v)) for v in values]
    if len(clamped) == 3:
        clamped.append(255)
    return (clamped[0], clamped[1], clamped[2], clamped[3])


def _parse_hex(hex_str: str) -> Optional[Color]:
    match = HEX_COLOR_PATTERN.match(hex_str.strip())
    if not match:
        return None
    digits = match.group(1)
    channels = [int(digits[i:i + 2], 16) for i in range(0, len(digits), 2)]
    return normalize_color(tuple(channels))


def _parse_csv(csv_str: str) -> Optional[Color]:
    match = CSV_COLOR_PATTERN.match(csv_str.strip())
    if not match:
        return None
    values = [match.group(i) for i in range(1, 5) if match.group(i) is not None]
    try:
        if any('.' in v for v in values):
            return normalize_color(tuple(float(v) for v in values))
        return normalize_color(tuple(int(v) for v in values))
    except ValueError:
        return None


def parse_color(color: ColorInput) -> Color:
    """
    Parse a color in any supported format to an RGBA tuple.

    Raises:
        ValueError: If the color format is invalid or unrecognized

    Examples:
        >>> parse_color("#C8C8C8")
        (200, 200, 200, 255)
        >>> parse_color("0,255,0,128")
        (0, 255, 0, 128)
        >>> parse_color([1.0, 0.5, 0.0])
        (255, 128, 0, 255)
    """
    if isinstance(color, str):
        result = _parse_hex(color)
        if result is None:
            result = _parse_csv(color)
        if result is None:
            raise ValueError(f"Invalid color format: {color}")
        return result

    if isinstance(color, (list, tuple)):
        return normalize_color(tuple(color))

    raise ValueError(f"Unsupported color type: {type(color).__name__}")

