from __future__ import annotations

import json
from pathlib import Path
from typing import Dict

DEFAULT_LOCALE = "en"

ERROR_HELP_NOT_FOUND = "ErrorHelpNotFound"
ERROR_UNSUPPORTED_ORGANIZATION = "ErrorUnsupportedOrganization"
ERROR_UNEXPECTED = "ErrorUnexpected"
GREETING = "Greeting"
WELCOME = "Welcome"
RESPONSE_END = "ResponseEnd"
PROMPT_QUESTION = "PromptQuestion"
REPROMPT_QUESTION = "RepromptQuestion"
PROMPT_ORGANIZATION_PLACEHOLDER = "PromptOrganizationPlaceholder"


def default_strings_dir() -> Path:
    return Path(__file__).resolve().parent / "resources" / "strings"


def _read_table(path: Path) -> Dict[str, str]:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    if not isinstance(data, dict):
        return {}
    return {str(key): str(value) for key, value in data.items()}


class StringResource:
    """Localized bot strings.

    Lookups fall back from the requested locale to its language, then to
    English; an unknown key returns the key itself.
    """

    def __init__(self, locale: str = DEFAULT_LOCALE, strings_dir: Path | None = None) -> None:
        self.locale = locale or DEFAULT_LOCALE
        self._dir = strings_dir or default_strings_dir()

        candidates = [DEFAULT_LOCALE]
        language = self.locale.split("-", 1)[0].lower()
        if language not in candidates:
            candidates.append(language)
        if self.locale.lower() not in candidates:
            candidates.append(self.locale.lower())

        table: Dict[str, str] = {}
        for name in candidates:
            table.update(_read_table(self._dir / f"{name}.json"))
        self._table = table

    def get(self, key: str) -> str:
        return self._table.get(key, key)

    @property
    def error_help_not_found(self) -> str:
        return self.get(ERROR_HELP_NOT_FOUND)

    @property
    def error_unsupported_organization(self) -> str:
        return self.get(ERROR_UNSUPPORTED_ORGANIZATION)

    @property
    def error_unexpected(self) -> str:
        return self.get(ERROR_UNEXPECTED)

    @property
    def response_welcome(self) -> str:
        return self.get(WELCOME)

    @property
    def response_end(self) -> str:
        return self.get(RESPONSE_END)

    @property
    def prompt_question(self) -> str:
        return self.get(PROMPT_QUESTION)

    @property
    def reprompt_question(self) -> str:
        return self.get(REPROMPT_QUESTION)

    @property
    def prompt_organization_placeholder(self) -> str:
        return self.get(PROMPT_ORGANIZATION_PLACEHOLDER)

    def response_greeting(self, user_name: str = "") -> str:
        name = (user_name or "").strip() or "there"
        return self.get(GREETING).replace("{name}", name)
