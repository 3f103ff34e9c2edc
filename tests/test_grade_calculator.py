"""
Tests for services/grade_calculator.py and services/mentions.py
"""

import pytest

from services.errors import InvalidInputError
from services.grade_calculator import (
    compute_subject_average,
    is_complete,
    validate_coefficient,
    validate_score,
)
from services.mentions import NOT_EVALUATED, classify_mention, mention_band


class TestComputeSubjectAverage:

    def test_two_interrogations_and_composition(self):
        assert compute_subject_average(14, 16, None, 15) == 20.0

    def test_three_interrogations_and_composition(self):
        assert compute_subject_average(14, 16, 15, 15) == 18.75

    def test_rounds_to_two_decimals(self):
        # (12 + 14 + 26) / 3 = 17.333...
        assert compute_subject_average(12, 14, None, 13) == 17.33

    def test_single_interrogation_is_undetermined(self):
        assert compute_subject_average(interrogation1=15) is None

    def test_composition_alone_is_undetermined(self):
        # counted twice, still below three entries
        assert compute_subject_average(composition=12) is None

    def test_no_scores_is_undetermined(self):
        assert compute_subject_average() is None

    def test_one_interrogation_plus_composition_reaches_the_floor(self):
        # [10, 13, 13] -> divided by 3
        assert compute_subject_average(10, None, None, 13) == 12.0

    def test_zero_scores_give_zero_not_none(self):
        assert compute_subject_average(0, 0, None, 0) == 0.0

    def test_third_interrogation_switches_divisor_to_four(self):
        # interrogations only: three entries, divisor 4
        assert compute_subject_average(10, 10, 10, None) == 7.5

    @pytest.mark.parametrize("i1,i2,comp", [(0, 20, 10), (7.5, 12.25, 19), (20, 20, 20), (3, 4, 5)])
    def test_formula_without_third_interrogation(self, i1, i2, comp):
        assert compute_subject_average(i1, i2, None, comp) == round((i1 + i2 + 2 * comp) / 3, 2)

    @pytest.mark.parametrize("i1,i2,i3,comp", [(0, 20, 10, 5), (11, 12, 13, 14), (20, 20, 20, 20)])
    def test_formula_with_third_interrogation(self, i1, i2, i3, comp):
        assert compute_subject_average(i1, i2, i3, comp) == round((i1 + i2 + i3 + 2 * comp) / 4, 2)


class TestValidation:

    def test_score_bounds_are_inclusive(self):
        assert validate_score(0) == 0.0
        assert validate_score(20) == 20.0

    @pytest.mark.parametrize("value", [-0.5, 20.01, 100])
    def test_score_out_of_range(self, value):
        with pytest.raises(InvalidInputError):
            validate_score(value, "composition")

    def test_non_numeric_score(self):
        with pytest.raises(InvalidInputError):
            validate_score("12")

    def test_none_score_passes(self):
        assert validate_score(None) is None

    def test_coefficient_bounds(self):
        assert validate_coefficient(0.5) == 0.5
        assert validate_coefficient(10) == 10.0
        with pytest.raises(InvalidInputError):
            validate_coefficient(0.25)
        with pytest.raises(InvalidInputError):
            validate_coefficient(11)

    def test_is_complete(self):
        assert is_complete(10, 12, 14)
        assert not is_complete(10, None, 14)


class TestMentions:

    @pytest.mark.parametrize("average,label", [
        (20, "Excellent"),
        (16.0, "Excellent"),
        (15.99, "Très Bien"),
        (14.0, "Très Bien"),
        (13.99, "Bien"),
        (12.0, "Bien"),
        (11.99, "Assez Bien"),
        (10.0, "Assez Bien"),
        (9.99, "Passable"),
        (0, "Passable"),
    ])
    def test_band_boundaries(self, average, label):
        assert classify_mention(average) == label

    def test_none_is_not_evaluated(self):
        assert classify_mention(None) == NOT_EVALUATED

    def test_band_info(self):
        band = mention_band(14.5)
        assert band["code"] == "TRES_BIEN"
        assert band["min"] == 14.0
        assert band["max"] == 16.0
