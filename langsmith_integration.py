import os
import uuid
from datetime import datetime, timezone
from typing import Any

from langsmith import Client

DEFAULT_PROJECT = "careers-bot"


def configure_langsmith(project: str | None = None) -> dict[str, Any]:
    api_key = os.getenv("LANGSMITH_API_KEY")
    project_name = project or os.getenv("LANGSMITH_PROJECT") or DEFAULT_PROJECT

    status: dict[str, Any] = {
        "has_api_key": bool(api_key),
        "project": project_name,
        "tracing_enabled": False,
    }

    if not api_key:
        return status

    if not os.getenv("LANGSMITH_TRACING"):
        os.environ["LANGSMITH_TRACING"] = "true"

    os.environ["LANGSMITH_PROJECT"] = project_name
    status["tracing_enabled"] = os.getenv("LANGSMITH_TRACING", "").lower() == "true"
    return status


class LangSmithLogger:
    """Records one LangSmith run per conversation turn.

    Without an API key every event is echoed to stdout instead (when ``echo``
    is on), so local runs still show the dialog trace.
    """

    def __init__(self, api_key: str | None = None, project: str | None = None, echo: bool | None = None):
        self.api_key = api_key or os.getenv("LANGSMITH_API_KEY")
        self.project = project or os.getenv("LANGSMITH_PROJECT") or DEFAULT_PROJECT
        if echo is None:
            echo = os.getenv("BOT_TRACE_ECHO", "").lower() in {"1", "true", "yes"}
        self.echo = echo
        self.enabled = bool(self.api_key)
        self.client = None
        self.run_id = None
        self._events: list[dict[str, Any]] = []

        if self.enabled:
            try:
                self.client = Client(api_key=self.api_key)
            except Exception as e:
                print(f"[LangSmith] Client init failed: {e}")
                self.enabled = False

    def _print(self, text: str) -> None:
        if self.echo:
            print(text)

    def start_run(self, name: str, inputs: dict | None = None) -> str:
        self.run_id = str(uuid.uuid4())
        self._events = []
        if self.enabled:
            try:
                self.client.create_run(
                    id=self.run_id,
                    name=name,
                    project_name=self.project,
                    inputs=inputs or {},
                    run_type="chain",
                    start_time=datetime.now(timezone.utc),
                )
            except Exception as e:
                print(f"[LangSmith] start_run failed: {e}")
                self.enabled = False

        self._print(f"[LangSmith] run_started: {self.run_id} name={name}")
        return self.run_id

    def log_event(self, body: str, metadata: dict | None = None) -> None:
        metadata = metadata or {}
        self._events.append(
            {
                "name": body,
                "time": datetime.now(timezone.utc).isoformat(),
                "kwargs": metadata,
            }
        )
        self._print(f"[LangSmith-LOG] {body} | {metadata}")

    def end_run(self, status: str = "completed", outputs: dict | None = None, error: str | None = None) -> None:
        if self.enabled and self.run_id:
            try:
                self.client.update_run(
                    self.run_id,
                    outputs=outputs or {},
                    error=error,
                    events=self._events,
                    end_time=datetime.now(timezone.utc),
                )
            except Exception as e:
                print(f"[LangSmith] end_run failed: {e}")
                self.enabled = False

        self._print(f"[LangSmith] run_ended: {self.run_id} status={status}")


def get_default_logger() -> LangSmithLogger:
    return LangSmithLogger()
