from __future__ import annotations

from typing import Any, Dict

import requests

from career_advise import CareerAdvise, ClassificationResult
from config import BotSettings


class RecognizerNotConfiguredError(RuntimeError):
    pass


def normalize_host(host: str) -> str:
    host = (host or "").strip()
    if not host.lower().startswith("https://"):
        host = "https://" + host
    return host.rstrip("/")


class CareerAdviseRecognizer:
    """Client for the LUIS prediction endpoint of the career advice app.

    The recognizer is only configured when the app id, API key and host name
    are all present; flows must check ``is_configured`` before calling it.
    """

    def __init__(
        self,
        app_id: str = "",
        api_key: str = "",
        host_name: str = "",
        slot: str = "production",
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self._configured = bool(app_id) and bool(api_key) and bool(host_name)
        self.app_id = app_id
        self.api_key = api_key
        self.endpoint = normalize_host(host_name) if self._configured else ""
        self.slot = slot or "production"
        self.timeout = timeout
        self._session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: BotSettings) -> "CareerAdviseRecognizer":
        return cls(
            app_id=settings.luis_app_id,
            api_key=settings.luis_api_key,
            host_name=settings.luis_api_host_name,
            slot=settings.luis_slot,
            timeout=settings.http_timeout,
        )

    @property
    def is_configured(self) -> bool:
        return self._configured

    def _predict_url(self) -> str:
        return f"{self.endpoint}/luis/prediction/v3.0/apps/{self.app_id}/slots/{self.slot}/predict"

    def recognize(self, utterance: str) -> CareerAdvise:
        if not self._configured:
            raise RecognizerNotConfiguredError("LUIS is not configured; check is_configured first")

        params = {
            "subscription-key": self.api_key,
            "query": utterance or "",
            "verbose": "true",
        }
        response = self._session.get(self._predict_url(), params=params, timeout=self.timeout)
        response.raise_for_status()
        payload: Dict[str, Any] = response.json()
        if not isinstance(payload, dict):
            payload = {}
        prediction = payload.get("prediction")
        if not isinstance(prediction, dict):
            prediction = {}
        return CareerAdvise.from_prediction(str(payload.get("query", utterance or "")), prediction)

    def classify(self, utterance: str, min_score: float = 0.0) -> ClassificationResult:
        return self.recognize(utterance).classification(min_score)
