from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel


def load_env_file(env_path: Path | None = None) -> None:
    env_path = env_path or Path(__file__).with_name(".env")
    if not env_path.exists():
        return
    load_dotenv(env_path, override=False)


class BotSettings(BaseModel):
    luis_app_id: str = ""
    luis_api_key: str = ""
    luis_api_host_name: str = ""
    luis_slot: str = "production"

    kpmg_qna_knowledgebase_id: str = ""
    kpmg_qna_endpoint_key: str = ""
    kpmg_qna_endpoint_host_name: str = ""

    locale: str = "en"
    db_path: str = "data/careers_bot.db"
    http_timeout: float = 10.0
    frontend_origin: str = "*"


def _env(name: str, default: str = "") -> str:
    return os.getenv(name, default).strip()


def load_settings() -> BotSettings:
    load_env_file()

    timeout_raw = _env("HTTP_TIMEOUT_SECONDS", "10")
    try:
        timeout = float(timeout_raw)
    except ValueError:
        timeout = 10.0

    return BotSettings(
        luis_app_id=_env("LUIS_APP_ID"),
        luis_api_key=_env("LUIS_API_KEY"),
        luis_api_host_name=_env("LUIS_API_HOST_NAME"),
        luis_slot=_env("LUIS_SLOT", "production") or "production",
        kpmg_qna_knowledgebase_id=_env("KPMG_QNA_KNOWLEDGEBASE_ID"),
        kpmg_qna_endpoint_key=_env("KPMG_QNA_ENDPOINT_KEY"),
        kpmg_qna_endpoint_host_name=_env("KPMG_QNA_ENDPOINT_HOST_NAME"),
        locale=_env("BOT_LOCALE", "en") or "en",
        db_path=_env("APP_DB_PATH", "data/careers_bot.db") or "data/careers_bot.db",
        http_timeout=timeout,
        frontend_origin=_env("FRONTEND_ORIGIN", "*") or "*",
    )
