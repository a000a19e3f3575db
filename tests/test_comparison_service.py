import pytest

from services.comparison_service import ComparisonService


@pytest.mark.parametrize("current,previous,expected", [
    (150, 100, ("50.0%", True)),
    (75, 100, ("-25.0%", True)),
    (0, 0, ("0.0%", True)),
    (80, 0, ("N/A", False)),
])
def test_percentage_change(current, previous, expected):
    assert ComparisonService.calculate_percentage_change(current, previous) == expected


def test_unformatted_change():
    assert ComparisonService.calculate_percentage_change(150, 100, format_result=False) == (50.0, True)
    assert ComparisonService.calculate_percentage_change(5, 0, format_result=False) == (None, False)


def test_positive_change_includes_flat():
    assert ComparisonService.is_positive_change(100, 100)
    assert ComparisonService.is_positive_change(80, 0)
    assert not ComparisonService.is_positive_change(99, 100)
