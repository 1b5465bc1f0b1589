"""Feedback phrase catalogs.

All user-facing feedback text lives here as data so it can be reviewed,
tested and localized apart from the narrator logic:

* keyword rules: label keywords → good points / improvements
* score bands: band → good points (category mode and score-only mode)
* improvement pools drawn at random to fill the improvement quota

The Japanese catalog carries the wording shown to users since launch and
is the default; ``FEEDBACK_LOCALE=en`` switches to English.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Mapping, Tuple

from ..shared.errors import UnknownLocaleError


class ScoreBand(str, Enum):
    """Score range driving the fixed tier feedback."""

    EXCELLENT = "EXCELLENT"  # >= 90
    GOOD = "GOOD"  # >= 80
    FAIR = "FAIR"  # >= 70
    BASIC = "BASIC"  # everything below


def score_band(score: int) -> ScoreBand:
    if score >= 90:
        return ScoreBand.EXCELLENT
    if score >= 80:
        return ScoreBand.GOOD
    if score >= 70:
        return ScoreBand.FAIR
    return ScoreBand.BASIC


class FeedbackKind(str, Enum):
    GOOD_POINT = "GOOD_POINT"
    IMPROVEMENT = "IMPROVEMENT"


@dataclass(frozen=True)
class KeywordPhrase:
    """
    Keyword rule of the category-driven feedback.

    Fires when any label contains any keyword, or, with
    ``when_absent=True``, when no label contains any keyword.
    """

    keywords: Tuple[str, ...]
    phrases: Tuple[str, ...]
    kind: FeedbackKind
    when_absent: bool = False


@dataclass(frozen=True)
class PhraseCatalog:
    locale: str
    keyword_rules: Tuple[KeywordPhrase, ...]
    variety_point: str
    single_category_improvement: str
    band_points: Mapping[ScoreBand, Tuple[str, ...]]
    fallback_band_points: Mapping[ScoreBand, Tuple[str, ...]]
    # each extra is included with 50% probability in score-only mode
    fallback_band_extras: Mapping[ScoreBand, Tuple[str, ...]]
    improvement_pool: Tuple[str, ...]
    fallback_improvement_pool: Tuple[str, ...]
    fallback_notice: str

    def __post_init__(self) -> None:
        for name in ("band_points", "fallback_band_points", "fallback_band_extras"):
            table = getattr(self, name)
            missing = [band.value for band in ScoreBand if band not in table]
            if missing:
                raise ValueError(f"{self.locale}: {name} missing bands {missing}")


JA_CATALOG = PhraseCatalog(
    locale="ja",
    keyword_rules=(
        KeywordPhrase(
            keywords=("vegetable",),
            phrases=("野菜が豊富に含まれています", "ビタミンとミネラルが豊富です"),
            kind=FeedbackKind.GOOD_POINT,
        ),
        KeywordPhrase(
            keywords=("meat_or_tomato", "fish", "chicken"),
            phrases=("良質なタンパク質が含まれています",),
            kind=FeedbackKind.GOOD_POINT,
        ),
        KeywordPhrase(
            keywords=("egg_or_cheese",),
            phrases=("タンパク質とカルシウムが豊富です",),
            kind=FeedbackKind.GOOD_POINT,
        ),
        KeywordPhrase(
            keywords=("bread_or_meat",),
            phrases=("炭水化物が適度に含まれています",),
            kind=FeedbackKind.GOOD_POINT,
        ),
        KeywordPhrase(
            keywords=("vegetable",),
            phrases=("野菜をもう少し加えてみましょう",),
            kind=FeedbackKind.IMPROVEMENT,
            when_absent=True,
        ),
        KeywordPhrase(
            keywords=("pizza", "burger"),
            phrases=("油分を控えめにした料理に挑戦してみてください",),
            kind=FeedbackKind.IMPROVEMENT,
        ),
    ),
    variety_point="彩り豊かで栄養バランスが良いです",
    single_category_improvement="他の食材も加えて栄養バランスを整えましょう",
    band_points={
        ScoreBand.EXCELLENT: ("栄養バランスが非常に良いです", "健康的な料理です"),
        ScoreBand.GOOD: ("全体的にバランスの取れた料理です",),
        ScoreBand.FAIR: ("基本的な栄養素は含まれています",),
        ScoreBand.BASIC: ("料理を作った努力は素晴らしいです",),
    },
    fallback_band_points={
        ScoreBand.EXCELLENT: (
            "栄養バランスが非常に良いです",
            "彩り豊かで見た目も美しいです",
            "野菜が豊富に含まれています",
        ),
        ScoreBand.GOOD: ("全体的にバランスの取れた料理です", "野菜が適度に含まれています"),
        ScoreBand.FAIR: ("基本的な栄養素は含まれています",),
        ScoreBand.BASIC: ("料理を作った努力は素晴らしいです",),
    },
    fallback_band_extras={
        ScoreBand.EXCELLENT: ("タンパク質の摂取量が適切です",),
        ScoreBand.GOOD: ("カロリーが適切です",),
        ScoreBand.FAIR: ("見た目が良いです",),
        ScoreBand.BASIC: (),
    },
    improvement_pool=(
        "野菜をもう少し増やしてみましょう",
        "彩りを豊かにするために色とりどりの野菜を加えてみてください",
        "タンパク質の量を調整してみましょう",
        "油の使用量を控えめにしてみてください",
        "塩分を控えめにしてみましょう",
        "食物繊維を多く含む食材を加えてみてください",
    ),
    fallback_improvement_pool=(
        "野菜をもう少し増やしてみましょう",
        "彩りを豊かにするために色とりどりの野菜を加えてみてください",
        "タンパク質の量を調整してみましょう",
        "油の使用量を控えめにしてみてください",
        "塩分を控えめにしてみましょう",
        "食物繊維を多く含む食材を加えてみてください",
        "ビタミンCを多く含む食材を加えてみてください",
    ),
    fallback_notice="AI分析に失敗しました。フォールバック評価を表示しています。",
)


EN_CATALOG = PhraseCatalog(
    locale="en",
    keyword_rules=(
        KeywordPhrase(
            keywords=("vegetable",),
            phrases=("Plenty of vegetables", "Rich in vitamins and minerals"),
            kind=FeedbackKind.GOOD_POINT,
        ),
        KeywordPhrase(
            keywords=("meat_or_tomato", "fish", "chicken"),
            phrases=("Contains good-quality protein",),
            kind=FeedbackKind.GOOD_POINT,
        ),
        KeywordPhrase(
            keywords=("egg_or_cheese",),
            phrases=("Rich in protein and calcium",),
            kind=FeedbackKind.GOOD_POINT,
        ),
        KeywordPhrase(
            keywords=("bread_or_meat",),
            phrases=("A moderate amount of carbohydrates",),
            kind=FeedbackKind.GOOD_POINT,
        ),
        KeywordPhrase(
            keywords=("vegetable",),
            phrases=("Try adding a few more vegetables",),
            kind=FeedbackKind.IMPROVEMENT,
            when_absent=True,
        ),
        KeywordPhrase(
            keywords=("pizza", "burger"),
            phrases=("Try a dish that uses less oil",),
            kind=FeedbackKind.IMPROVEMENT,
        ),
    ),
    variety_point="Colorful and well balanced",
    single_category_improvement="Add other ingredients to balance the meal",
    band_points={
        ScoreBand.EXCELLENT: ("Excellent nutritional balance", "A healthy dish"),
        ScoreBand.GOOD: ("A well-balanced dish overall",),
        ScoreBand.FAIR: ("Covers the basic nutrients",),
        ScoreBand.BASIC: ("Great effort cooking this dish",),
    },
    fallback_band_points={
        ScoreBand.EXCELLENT: (
            "Excellent nutritional balance",
            "Colorful and beautifully presented",
            "Plenty of vegetables",
        ),
        ScoreBand.GOOD: ("A well-balanced dish overall", "A fair amount of vegetables"),
        ScoreBand.FAIR: ("Covers the basic nutrients",),
        ScoreBand.BASIC: ("Great effort cooking this dish",),
    },
    fallback_band_extras={
        ScoreBand.EXCELLENT: ("Protein intake looks right",),
        ScoreBand.GOOD: ("Calories look appropriate",),
        ScoreBand.FAIR: ("Nicely presented",),
        ScoreBand.BASIC: (),
    },
    improvement_pool=(
        "Try increasing the vegetables a little",
        "Add vegetables of different colors for variety",
        "Adjust the amount of protein",
        "Use less cooking oil",
        "Go easy on the salt",
        "Add ingredients rich in dietary fiber",
    ),
    fallback_improvement_pool=(
        "Try increasing the vegetables a little",
        "Add vegetables of different colors for variety",
        "Adjust the amount of protein",
        "Use less cooking oil",
        "Go easy on the salt",
        "Add ingredients rich in dietary fiber",
        "Add ingredients rich in vitamin C",
    ),
    fallback_notice="AI analysis failed, showing fallback evaluation",
)


CATALOGS: Dict[str, PhraseCatalog] = {
    JA_CATALOG.locale: JA_CATALOG,
    EN_CATALOG.locale: EN_CATALOG,
}


def get_catalog(locale: str = "ja") -> PhraseCatalog:
    """Resolve a catalog by locale (``ja_JP`` and ``ja`` are the same)."""
    key = locale.strip().lower().replace("_", "-").split("-")[0]
    try:
        return CATALOGS[key]
    except KeyError:
        raise UnknownLocaleError(f"No phrase catalog for locale '{locale}'") from None
