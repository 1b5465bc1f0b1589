from cookscore.domain.evaluation.models import CategoryGuess
from cookscore.domain.evaluation.summary import summarize


def test_empty_categories_have_no_summary() -> None:
    assert summarize([]) is None


def test_summary_limits() -> None:
    labels = ["ramen", "egg", "pork", "onion", "seaweed", "bamboo"]
    categories = [CategoryGuess(label=l, score=0.375) for l in labels]
    summary = summarize(categories)
    assert summary is not None
    assert summary.dish_name == "ramen"
    assert summary.ingredients == labels[:5]
    assert [d.label for d in summary.detections] == labels[:3]
    # 37.5 rounds half up
    assert [d.confidence_pct for d in summary.detections] == [38, 38, 38]


def test_summary_serialises_camel_case() -> None:
    summary = summarize([CategoryGuess(label="vegetables", score=1.0)])
    assert summary is not None
    dumped = summary.model_dump(by_alias=True)
    assert dumped == {
        "dishName": "vegetables",
        "ingredients": ["vegetables"],
        "detections": [{"label": "vegetables", "confidencePct": 100}],
    }
