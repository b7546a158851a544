import pytest

from finboard.formatting import format_abbrev, format_pct, format_variance


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (0, "0.00"),
        (512.345, "512.35"),
        (999.99, "999.99"),
        (1_000, "1.00K"),
        (45_300, "45.30K"),
        (1_234_567, "1.2M"),
        (-1_234_567, "(1.2M)"),
        (-250, "(250.00)"),
    ],
)
def test_format_abbrev(value, expected) -> None:
    assert format_abbrev(value) == expected


def test_format_pct_and_variance() -> None:
    assert format_pct(12.345) == "12.35%"
    assert format_variance(0) == "+0.00"
    assert format_variance(1500) == "+1.50K"
    assert format_variance(-1500) == "(1.50K)"
