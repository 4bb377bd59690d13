from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest

from career_advise import ORGANIZATION_ENTITY, QUESTION_TYPE_ENTITY, CareerAdvise, ClassificationResult
from db_store import MemoryStore
from dialogs.cards import CardRenderer, CardTemplate
from dialogs.runner import CareersBot
from knowledge_base import QueryResult
from langsmith_integration import LangSmithLogger
from localization import StringResource


def advise(
    text: str,
    intents: Dict[str, float],
    organization: Optional[str] = None,
    question_type: Optional[str] = None,
) -> CareerAdvise:
    entities: Dict[str, Any] = {}
    if organization is not None:
        entities[ORGANIZATION_ENTITY] = [[organization]]
    if question_type is not None:
        entities[QUESTION_TYPE_ENTITY] = [[question_type]]
    return CareerAdvise.from_prediction(
        text,
        {"intents": {name: {"score": score} for name, score in intents.items()}, "entities": entities},
    )


class FakeRecognizer:
    def __init__(self, predictions: Dict[str, CareerAdvise] | None = None, configured: bool = True) -> None:
        self.predictions = predictions or {}
        self.is_configured = configured
        self.calls: List[str] = []
        self.min_scores: List[float] = []

    def recognize(self, utterance: str) -> CareerAdvise:
        self.calls.append(utterance)
        return self.predictions.get(utterance, CareerAdvise(text=utterance))

    def classify(self, utterance: str, min_score: float = 0.0) -> ClassificationResult:
        self.min_scores.append(min_score)
        return self.recognize(utterance).classification(min_score)


class FakeKnowledgeBase:
    def __init__(self, answers: List[QueryResult] | None = None) -> None:
        self.answers = answers or []
        self.calls: List[Dict[str, Any]] = []

    def query(self, utterance, top=3, score_threshold=0.5, category=None):
        self.calls.append(
            {"utterance": utterance, "top": top, "score_threshold": score_threshold, "category": category}
        )
        return list(self.answers)


@pytest.fixture
def quiet_logger(monkeypatch) -> LangSmithLogger:
    monkeypatch.delenv("LANGSMITH_API_KEY", raising=False)
    return LangSmithLogger(echo=False)


@pytest.fixture
def strings() -> StringResource:
    return StringResource("en")


@pytest.fixture
def cards() -> CardRenderer:
    return CardRenderer()


@pytest.fixture
def make_bot(quiet_logger):
    def _make(recognizer=None, knowledge_base=None, store=None) -> CareersBot:
        return CareersBot(
            store or MemoryStore(),
            recognizer=recognizer,
            knowledge_base=knowledge_base,
            logger=quiet_logger,
        )

    return _make


def texts(activities: List[Dict[str, Any]]) -> List[str]:
    return [str(a["text"]) for a in activities if a.get("type") == "message" and a.get("text")]


def rendered_cards(activities: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [item for a in activities for item in (a.get("attachments") or [])]


def card(template: CardTemplate) -> Dict[str, Any]:
    return CardRenderer().render(template)
