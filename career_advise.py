from __future__ import annotations

from typing import Any, Dict, NamedTuple, Optional, Tuple

from pydantic import BaseModel, Field

from dialogs.state import Intent, Organization

ORGANIZATION_ENTITY = "CareerQuestion_Organization"
QUESTION_TYPE_ENTITY = "CareerQuestion_Type"


class ClassificationResult(NamedTuple):
    intent: Intent
    score: float
    organization: Organization
    question_type: Optional[str]


def _single_entity_value(entities: Dict[str, Any], name: str) -> Optional[str]:
    # Only the first occurrence counts, and it must resolve to exactly one value.
    try:
        values = entities[name][0]
        if len(values) == 1:
            return str(values[0])
    except (KeyError, IndexError, TypeError):
        pass
    return None


class CareerAdvise(BaseModel):
    """Prediction for one utterance from the career advice language model."""

    text: str = ""
    altered_text: Optional[str] = None
    intents: Dict[Intent, float] = Field(default_factory=dict)
    entities: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_prediction(cls, query: str, prediction: Dict[str, Any]) -> "CareerAdvise":
        intents: Dict[Intent, float] = {}
        raw_intents = prediction.get("intents")
        if isinstance(raw_intents, dict):
            known = {item.value: item for item in Intent}
            for name, payload in raw_intents.items():
                intent = known.get(str(name))
                if intent is None:
                    continue
                score = payload.get("score") if isinstance(payload, dict) else payload
                try:
                    intents[intent] = float(score)
                except (TypeError, ValueError):
                    continue

        entities = prediction.get("entities")
        return cls(
            text=query,
            altered_text=prediction.get("alteredQuery"),
            intents=intents,
            entities=entities if isinstance(entities, dict) else {},
        )

    def top_intent(self, min_score: float = 0.0) -> Tuple[Intent, float]:
        """Return the intent scoring strictly above ``min_score``.

        Falls back to ``(Intent.NONE, min_score)``. Ties keep whichever intent
        the service listed first.
        """
        best = Intent.NONE
        best_score = min_score
        for intent, score in self.intents.items():
            if score > best_score:
                best = intent
                best_score = score
        return best, best_score

    @property
    def organization(self) -> Organization:
        return Organization.parse(_single_entity_value(self.entities, ORGANIZATION_ENTITY))

    @property
    def question_type(self) -> Optional[str]:
        return _single_entity_value(self.entities, QUESTION_TYPE_ENTITY)

    def classification(self, min_score: float = 0.0) -> ClassificationResult:
        intent, score = self.top_intent(min_score)
        return ClassificationResult(intent, score, self.organization, self.question_type)

