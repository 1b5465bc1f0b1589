import pytest

from cookscore.domain.evaluation.models import CategoryGuess
from cookscore.domain.evaluation.score_calculator import (
    calculate_score,
    round_half_up,
    score_delta,
)


def _g(label: str, score: float) -> CategoryGuess:
    return CategoryGuess(label=label, score=score)


def test_empty_categories_base_score() -> None:
    assert calculate_score([]) == 50


def test_vegetables() -> None:
    assert calculate_score([_g("vegetables", 1.0)]) == 70


def test_pizza() -> None:
    # 50 - 10 * 0.9 = 41
    assert calculate_score([_g("pizza", 0.9)]) == 41


def test_unknown_label_contributes_nothing() -> None:
    assert calculate_score([_g("mixed_dish", 0.5)]) == 50


def test_first_matching_group_wins() -> None:
    # "chicken" (+15) is checked before "fried" (-10)
    assert score_delta(_g("fried_chicken", 1.0)) == pytest.approx(15.0)
    assert calculate_score([_g("vegetable_pizza", 1.0)]) == 70


def test_matching_is_case_insensitive() -> None:
    assert calculate_score([_g("Grilled_Chicken", 1.0)]) == 65


def test_clamped_to_bounds() -> None:
    assert calculate_score([_g("vegetables", 1.0)] * 3) == 100
    assert calculate_score([_g("burger", 1.0)] * 6) == 0


def test_duplicates_accumulate() -> None:
    assert calculate_score([_g("rice", 0.5), _g("rice", 0.5)]) == 60


def test_half_rounds_up() -> None:
    # 50 + 20 * 0.125 = 52.5 -> 53 (banker's rounding would give 52)
    assert calculate_score([_g("vegetables", 0.125)]) == 53
    assert round_half_up(2.5) == 3
    assert round_half_up(-0.5) == 0
    assert round_half_up(41.4) == 41


def test_result_is_int() -> None:
    assert isinstance(calculate_score([_g("egg_or_cheese", 0.3)]), int)
