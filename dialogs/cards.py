from __future__ import annotations

import copy
import json
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List

ADAPTIVE_CARD_CONTENT_TYPE = "application/vnd.microsoft.card.adaptive"


class CardTemplate(str, Enum):
    MENU = "menu"
    MENU_RETRY = "menu_retry"
    KPMG_CAREER = "kpmg_career"
    KPMG_CAREER_RETRY = "kpmg_career_retry"


CARD_FILES: Dict[CardTemplate, str] = {
    CardTemplate.MENU: "MenuCard.json",
    CardTemplate.MENU_RETRY: "RetryMenuCard.json",
    CardTemplate.KPMG_CAREER: "KpmgCareerCard.json",
    CardTemplate.KPMG_CAREER_RETRY: "RetryKpmgCareerCard.json",
}


def default_cards_dir() -> Path:
    return Path(__file__).resolve().parent.parent / "resources" / "cards"


@lru_cache(maxsize=16)
def _load_card(path: str) -> Dict[str, Any]:
    card = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(card, dict) or card.get("type") != "AdaptiveCard":
        raise ValueError(f"{path} is not an adaptive card")
    return card


class CardRenderer:
    def __init__(self, cards_dir: Path | None = None) -> None:
        self.cards_dir = cards_dir or default_cards_dir()

    def render(self, template: CardTemplate) -> Dict[str, Any]:
        path = self.cards_dir / CARD_FILES[CardTemplate(template)]
        return {
            "contentType": ADAPTIVE_CARD_CONTENT_TYPE,
            "content": copy.deepcopy(_load_card(str(path))),
        }


def card_choices(attachment: Dict[str, Any]) -> List[str]:
    content = attachment.get("content") if isinstance(attachment, dict) else None
    if not isinstance(content, dict):
        return []
    return [str(action.get("title", "")) for action in content.get("actions", []) if isinstance(action, dict)]


def card_text(attachment: Dict[str, Any]) -> str:
    content = attachment.get("content") if isinstance(attachment, dict) else None
    if not isinstance(content, dict):
        return ""
    lines = [
        str(block.get("text", "")).strip()
        for block in content.get("body", [])
        if isinstance(block, dict) and block.get("type") == "TextBlock"
    ]
    return "\n".join(line for line in lines if line)
