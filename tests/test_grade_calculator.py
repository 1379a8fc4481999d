from decimal import Decimal

import pytest

from services import grade_calculator as gc
from services.errors import GradeValidationError


def test_example_high_score_is_a_plus_band():
    result = gc.calculate(46, 50)
    assert result.percentage == Decimal("92.00")
    assert result.letter_grade == "A"
    assert result.grade_point == Decimal("4.00")
    assert result.band.name == "A+"
    assert gc.is_passing(result.letter_grade)
    assert gc.is_excellent(result.letter_grade)


def test_example_low_score_fails():
    result = gc.calculate(18, 50)
    assert result.percentage == Decimal("36.00")
    assert result.letter_grade == "F"
    assert result.grade_point == Decimal("0.00")
    assert not gc.is_passing(result.letter_grade)
    assert gc.is_failing(result.letter_grade)


@pytest.mark.parametrize(
    "percentage, letter, point",
    [
        ("100", "A", "4.00"),
        ("90", "A", "4.00"),
        ("89.99", "A", "3.75"),
        ("80", "A", "3.75"),
        ("75", "A", "3.50"),
        ("74.99", "B", "3.25"),
        ("70", "B", "3.25"),
        ("65", "B", "3.00"),
        ("60", "B", "2.75"),
        ("59.99", "C", "2.50"),
        ("55", "C", "2.50"),
        ("50", "C", "2.25"),
        ("45", "C", "2.00"),
        ("44.99", "D", "1.75"),
        ("40", "D", "1.75"),
        ("39.99", "F", "0.00"),
        ("0", "F", "0.00"),
    ],
)
def test_band_boundaries(percentage, letter, point):
    band = gc.band_for(Decimal(percentage))
    assert band.letter == letter
    assert band.grade_point == Decimal(point)


def test_bands_are_ordered_by_descending_lower_bound():
    bounds = [band.lower_bound for band in gc.GRADE_BANDS]
    assert bounds == sorted(bounds, reverse=True)
    assert bounds[-1] == Decimal("0")


@pytest.mark.parametrize(
    "marks, total, expected",
    [
        (2, 3, "66.67"),
        (1, 3, "33.33"),
        (1, 800, "0.13"),       # 0.125 → HALF_UP
        (1, 8, "12.50"),
        ("33.5", "40", "83.75"),
        (0, 100, "0.00"),
        (50, 50, "100.00"),
    ],
)
def test_percentage_rounds_half_up_to_two_places(marks, total, expected):
    assert gc.calculate_percentage(marks, total) == Decimal(expected)


def test_percentage_accepts_floats_without_binary_noise():
    assert gc.calculate_percentage(0.1, 0.3) == Decimal("33.33")


@pytest.mark.parametrize(
    "marks, total",
    [
        (None, 100),
        (10, None),
        (-1, 100),
        (101, 100),
        (0, 0),
        (5, -10),
    ],
)
def test_invalid_marks_fail_the_gate(marks, total):
    assert gc.is_valid_marks(marks, total) is False
    with pytest.raises(GradeValidationError):
        gc.calculate(marks, total)


@pytest.mark.parametrize("marks, total", [(0, 100), (100, 100), ("99.99", "100")])
def test_valid_marks_pass_the_gate(marks, total):
    assert gc.is_valid_marks(marks, total) is True


@pytest.mark.parametrize(
    "letter, good, average, below_average",
    [
        ("A", True, False, False),
        ("B", True, True, False),
        ("C", False, True, True),
        ("D", False, False, True),
        ("F", False, False, False),
    ],
)
def test_letter_predicates(letter, good, average, below_average):
    assert gc.is_good(letter) is good
    assert gc.is_average(letter) is average
    assert gc.is_below_average(letter) is below_average


def test_missing_letter_is_not_passing():
    assert gc.is_passing(None) is False
    assert gc.is_failing(None) is False


@pytest.mark.parametrize(
    "mean, label",
    [
        ("95", "Outstanding"),
        ("90", "Outstanding"),
        ("89.99", "Excellent"),
        ("70", "Good"),
        ("66", "Satisfactory"),
        ("50", "Needs Improvement"),
        ("49.99", "Below Expectations"),
        ("0", "Below Expectations"),
    ],
)
def test_performance_band(mean, label):
    assert gc.performance_band(Decimal(mean)) == label
