"""
Weighted screening score over the fixed nine-question set.
Pure functions: no I/O, no clock, no hidden state.

Bump MODEL_VERSION whenever a weight, polarity or the threshold changes so
stored results stay interpretable.
"""
from typing import Literal, Mapping

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

Polarity = Literal["positive", "inverted"]
RiskLabel = Literal["Possible Risk", "Low Risk"]

POSSIBLE_RISK: RiskLabel = "Possible Risk"
LOW_RISK: RiskLabel = "Low Risk"


class Question(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    weight: int = 1
    polarity: Polarity = "positive"
    text: str = ""


class ScoredResult(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        protected_namespaces=(),
    )

    score: int
    max_score: int
    threshold: int
    label: RiskLabel
    risk_factors: tuple[str, ...]
    breakdown: dict[str, int]
    model_version: str


QUESTION_SET: tuple[Question, ...] = (
    Question(id="q1", text="I have been feeling sad, anxious, or empty"),
    Question(id="q2", text="I have lost interest in activities I used to enjoy"),
    Question(id="q3", text="I have been sleeping too much or too little"),
    Question(id="q4", text="I have had changes in my appetite"),
    Question(id="q5", text="I have been feeling irritable or angry"),
    Question(id="q6", text="I have had difficulty concentrating or making decisions"),
    Question(id="q7", text="I have been feeling guilty or worthless"),
    # clinically most severe item
    Question(id="q8", weight=2, text="I have had thoughts of harming myself or my baby"),
    # phrased as adequacy: an explicit "No" is the risk signal
    Question(
        id="q9",
        polarity="inverted",
        text="Do you feel you have adequate support from your family/partner?",
    ),
)

QUESTION_IDS: tuple[str, ...] = tuple(q.id for q in QUESTION_SET)
MODEL_VERSION = "weighted-v1"
PREVIEW_MODEL_VERSION = "local-preview"
MAX_SCORE = sum(q.weight for q in QUESTION_SET)
RISK_THRESHOLD = 5  # ~half of MAX_SCORE


def contribution(question: Question, answer: object) -> int:
    """
    Weight carried by one answer. Anything that is not a real bool counts as
    unanswered and contributes nothing, whatever the polarity.
    """
    if not isinstance(answer, bool):
        return 0
    if question.polarity == "inverted":
        return question.weight if answer is False else 0
    return question.weight if answer is True else 0


def label_for(score_value: int, threshold: int = RISK_THRESHOLD) -> RiskLabel:
    return POSSIBLE_RISK if score_value >= threshold else LOW_RISK


def score(responses: Mapping[str, object], *, model_version: str = MODEL_VERSION) -> ScoredResult:
    breakdown = {q.id: contribution(q, responses.get(q.id)) for q in QUESTION_SET}
    total = sum(breakdown.values())
    return ScoredResult(
        score=total,
        max_score=MAX_SCORE,
        threshold=RISK_THRESHOLD,
        label=label_for(total),
        risk_factors=tuple(qid for qid in QUESTION_IDS if breakdown[qid] > 0),
        breakdown=breakdown,
        model_version=model_version,
    )


def preview(responses: Mapping[str, object]) -> ScoredResult:
    """
    Client-side preview for the results screen. Same rules, but tagged so it
    can never be mistaken for the server's authoritative result.
    """
    return score(responses, model_version=PREVIEW_MODEL_VERSION)
