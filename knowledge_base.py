from __future__ import annotations

from typing import Any, Dict, List, NamedTuple, Optional

import requests

from config import BotSettings
from recognizer import normalize_host

METADATA_TYPE_KEY = "type"


class QueryResult(NamedTuple):
    answer: str
    score: float


class QnAKnowledgeBase:
    """Thin client over a QnA Maker ``generateAnswer`` endpoint."""

    def __init__(
        self,
        knowledge_base_id: str,
        endpoint_key: str,
        host: str,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        if not knowledge_base_id or not endpoint_key or not host:
            raise ValueError("knowledge_base_id, endpoint_key and host are required")
        self.knowledge_base_id = knowledge_base_id
        self.endpoint_key = endpoint_key
        self.host = normalize_host(host)
        self.timeout = timeout
        self._session = session or requests.Session()

    def _answer_url(self) -> str:
        return f"{self.host}/knowledgebases/{self.knowledge_base_id}/generateAnswer"

    def build_request(
        self,
        utterance: str,
        top: int = 3,
        score_threshold: float = 0.5,
        category: Optional[str] = None,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "question": utterance or "",
            "top": int(top),
            # The service scores on a 0-100 scale.
            "scoreThreshold": float(score_threshold) * 100.0,
        }
        if category:
            body["strictFilters"] = [{"name": METADATA_TYPE_KEY, "value": str(category)}]
        return body

    def query(
        self,
        utterance: str,
        top: int = 3,
        score_threshold: float = 0.5,
        category: Optional[str] = None,
    ) -> List[QueryResult]:
        body = self.build_request(utterance, top=top, score_threshold=score_threshold, category=category)
        response = self._session.post(
            self._answer_url(),
            json=body,
            headers={"Authorization": f"EndpointKey {self.endpoint_key}"},
            timeout=self.timeout,
        )
        response.raise_for_status()
        payload = response.json()
        answers = payload.get("answers") if isinstance(payload, dict) else None

        results: List[QueryResult] = []
        for item in answers or []:
            if not isinstance(item, dict):
                continue
            answer = str(item.get("answer", "")).strip()
            try:
                score = float(item.get("score", 0.0)) / 100.0
            except (TypeError, ValueError):
                continue
            if not answer or score < score_threshold:
                continue
            results.append(QueryResult(answer, score))

        results.sort(key=lambda result: result.score, reverse=True)
        return results[: max(int(top), 0)]


def create_kpmg_knowledge_base(settings: BotSettings) -> QnAKnowledgeBase | None:
    if not (
        settings.kpmg_qna_knowledgebase_id
        and settings.kpmg_qna_endpoint_key
        and settings.kpmg_qna_endpoint_host_name
    ):
        return None
    return QnAKnowledgeBase(
        knowledge_base_id=settings.kpmg_qna_knowledgebase_id,
        endpoint_key=settings.kpmg_qna_endpoint_key,
        host=settings.kpmg_qna_endpoint_host_name,
        timeout=settings.http_timeout,
    )
