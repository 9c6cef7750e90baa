import pytest

from range_rings.utils.color import normalize_color, parse_color


@pytest.mark.parametrize(
    "value,expected",
    [
        ("#C8C8C8", (200, 200, 200, 255)),
        ("c8c8c880", (200, 200, 200, 128)),
        ("0,255,0", (0, 255, 0, 255)),
        ("(10, 20, 30, 40)", (10, 20, 30, 40)),
        ("0.5,0.5,0.5", (128, 128, 128, 255)),
        ([1.0, 0.5, 0.0], (255, 128, 0, 255)),
        ((300, -5, 10), (255, 0, 10, 255)),
        ((1, 1, 1), (1, 1, 1, 255)),
    ],
)
def test_parse_color(value, expected) -> None:
    assert parse_color(value) == expected


@pytest.mark.parametrize(
    "value",
    ["", "red", "#12345", "1,2", [1, 2], (1, 2, 3, 4, 5), (True, 0, 0), ("a", 0, 0), 42],
)
def test_invalid_colors_raise(value) -> None:
    with pytest.raises(ValueError):
        parse_color(value)


def test_normalize_color_mixed_types_are_treated_as_bytes() -> None:
    assert normalize_color((1, 0.5, 0)) == (1, 0, 0, 255)

