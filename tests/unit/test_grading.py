"""
Unit tests for grading, quadrant classification and insights.
"""

import itertools

import pytest

from telstudy.analytics.grade import Quadrant, calculate_grade, classify_question, grade_label
from telstudy.analytics.insights import (
    NO_DATA_MESSAGE,
    PERFECT_SCORE_MESSAGE,
    QUADRANT_MESSAGES,
    REVISIT_MESSAGE,
    dominant_quadrant,
    generate_insight,
)
from telstudy.analytics.summary import AnalyticsSummary


def counts(strength=0, needs_speed=0, reckless=0, weakness=0):
    return AnalyticsSummary(
        strength_count=strength,
        needs_speed_count=needs_speed,
        reckless_count=reckless,
        weakness_count=weakness,
    )


class TestCalculateGrade:
    def test_zero_total_is_zero(self):
        assert calculate_grade(0, 0) == 0

    @pytest.mark.parametrize(
        "correct,total,expected",
        [(3, 4, 75.0), (2, 3, 66.67), (1, 3, 33.33), (5, 5, 100.0), (0, 7, 0.0)],
    )
    def test_percentage_rounded(self, correct, total, expected):
        assert calculate_grade(correct, total) == expected
        assert calculate_grade(correct, total) == round(correct / total * 100, 2)


class TestGradeLabel:
    @pytest.mark.parametrize(
        "grade,label",
        [
            (100, "A"),
            (90, "A"),
            (89.99, "B"),
            (80, "B"),
            (79.99, "C"),
            (70, "C"),
            (69.99, "D"),
            (60, "D"),
            (59.99, "F"),
            (0, "F"),
        ],
    )
    def test_band_boundaries(self, grade, label):
        assert grade_label(grade) == label


class TestClassifyQuestion:
    def test_equal_to_average_counts_as_fast(self):
        assert classify_question(4000, True, 4000) == Quadrant.STRENGTH
        assert classify_question(4000, False, 4000) == Quadrant.RECKLESS

    def test_all_quadrants(self):
        assert classify_question(1000, True, 2000) == "strength"
        assert classify_question(3000, True, 2000) == "needs-speed"
        assert classify_question(1000, False, 2000) == "reckless"
        assert classify_question(3000, False, 2000) == "weakness"

    def test_zero_average(self):
        assert classify_question(0, True, 0) == Quadrant.STRENGTH
        assert classify_question(1, False, 0) == Quadrant.WEAKNESS


class TestGenerateInsight:
    def test_no_data(self):
        result = generate_insight(counts())
        assert result == NO_DATA_MESSAGE
        assert "complete a quiz" in result.lower()

    def test_perfect_score_ignores_speed(self):
        assert generate_insight(counts(strength=5, needs_speed=5)) == PERFECT_SCORE_MESSAGE
        assert "perfect score" in generate_insight(counts(needs_speed=3)).lower()

    def test_all_incorrect(self):
        result = generate_insight(counts(reckless=5, weakness=5))
        assert result == REVISIT_MESSAGE
        assert "revisit" in result.lower()

    @pytest.mark.parametrize(
        "summary,quadrant",
        [
            (counts(strength=8, needs_speed=1, weakness=1), Quadrant.STRENGTH),
            (counts(strength=1, needs_speed=8, weakness=1), Quadrant.NEEDS_SPEED),
            (counts(strength=1, reckless=8, weakness=1), Quadrant.RECKLESS),
            (counts(strength=1, reckless=1, weakness=8), Quadrant.WEAKNESS),
        ],
    )
    def test_dominant_quadrant_message(self, summary, quadrant):
        assert generate_insight(summary) == QUADRANT_MESSAGES[quadrant]

    def test_tie_goes_to_weakness(self):
        assert generate_insight(counts(needs_speed=4, weakness=4)) == QUADRANT_MESSAGES[Quadrant.WEAKNESS]

    def test_tie_priority_order(self):
        assert dominant_quadrant(counts(strength=2, reckless=2)) == Quadrant.RECKLESS
        assert dominant_quadrant(counts(strength=2, needs_speed=2)) == Quadrant.NEEDS_SPEED
        assert dominant_quadrant(counts(strength=1, needs_speed=1, reckless=1, weakness=1)) == Quadrant.WEAKNESS

    def test_accepts_mapping(self):
        result = generate_insight({"strength_count": 1, "weakness_count": 3})
        assert result == QUADRANT_MESSAGES[Quadrant.WEAKNESS]

    def test_non_empty_for_all_small_count_combinations(self):
        for combo in itertools.product(range(4), repeat=4):
            result = generate_insight(counts(*combo))
            assert isinstance(result, str) and result
