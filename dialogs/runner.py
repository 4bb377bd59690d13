from __future__ import annotations

import uuid
from typing import Any, Dict, List

from langchain_core.messages import HumanMessage

from config import BotSettings, load_settings
from knowledge_base import create_kpmg_knowledge_base
from langsmith_integration import LangSmithLogger, configure_langsmith, get_default_logger
from localization import StringResource
from recognizer import CareerAdviseRecognizer

from .cards import CardRenderer, card_choices, card_text
from .graph import build_dialog_graph
from .messages import message_activity, normalize_messages, serialize_messages_openai
from .state import ConversationMember, DialogState


def member_key(user_id: str) -> str:
    return f"user/{user_id}"


class CareersBot:
    """Runs one conversation turn at a time against a state store.

    The member record, dialog stack and transcript are only written back
    after the graph finished the turn.
    """

    def __init__(
        self,
        store: Any,
        recognizer: Any = None,
        knowledge_base: Any = None,
        strings: StringResource | None = None,
        cards: CardRenderer | None = None,
        logger: LangSmithLogger | None = None,
    ) -> None:
        self.store = store
        self.strings = strings or StringResource()
        self.logger = logger or get_default_logger()
        self.graph = build_dialog_graph(
            recognizer=recognizer,
            knowledge_base=knowledge_base,
            strings=self.strings,
            cards=cards,
            logger=self.logger,
        ).compile()

    @classmethod
    def from_settings(cls, store: Any, settings: BotSettings | None = None) -> "CareersBot":
        settings = settings or load_settings()
        configure_langsmith()
        return cls(
            store,
            recognizer=CareerAdviseRecognizer.from_settings(settings),
            knowledge_base=create_kpmg_knowledge_base(settings),
            strings=StringResource(settings.locale),
        )

    def on_turn(
        self,
        conversation_id: str,
        user_id: str,
        text: str,
        user_name: str = "",
    ) -> List[Dict[str, Any]]:
        saved = self.store.get_conversation_state(conversation_id) or {}
        member = self.store.get_or_create_member(member_key(user_id))
        messages = normalize_messages(saved.get("messages", []))
        messages.append(HumanMessage(content=text))

        state: DialogState = {
            "conversation_id": conversation_id,
            "user_id": user_id,
            "user_name": user_name,
            "text": text,
            "member": member.model_dump(mode="json"),
            "stack": list(saved.get("stack") or []),
            "route": {},
            "activities": [],
            "messages": messages,
            "conversation_complete": False,
        }

        self.logger.start_run("dialog_turn", {"conversation_id": conversation_id, "text": text})
        try:
            result = self.graph.invoke(state)
        except Exception as exc:
            self.logger.log_event("turn_error", {"conversation_id": conversation_id, "error": str(exc)})
            self.logger.end_run("error", error=str(exc))
            return [message_activity(self.strings.error_unexpected)]

        self.store.set_member(member_key(user_id), ConversationMember.model_validate(result.get("member") or {}))
        self.store.update_conversation_state(
            conversation_id,
            {
                "stack": result.get("stack") or [],
                "messages": serialize_messages_openai(result.get("messages", [])),
                "conversation_complete": bool(result.get("conversation_complete", False)),
            },
        )
        activities = list(result.get("activities") or [])
        self.logger.end_run("completed", outputs={"activities": len(activities)})
        return activities


def format_activity(activity: Dict[str, Any]) -> str:
    if activity.get("type") != "message":
        return ""
    lines: List[str] = []
    if activity.get("text"):
        lines.append(str(activity["text"]))
    for attachment in activity.get("attachments") or []:
        title = card_text(attachment)
        if title:
            lines.append(title)
        for idx, choice in enumerate(card_choices(attachment), start=1):
            lines.append(f"  {idx}. {choice}")
    return "\n".join(lines)


def _resolve_choice(text: str, last_choices: List[str]) -> str:
    if text.isdigit() and 1 <= int(text) <= len(last_choices):
        return last_choices[int(text) - 1]
    return text


def run_console(bot: CareersBot, user_name: str = "") -> None:
    print("Careers Bot (type 'exit' to stop)\n")
    conversation_id = str(uuid.uuid4())
    user_id = "console-user"
    last_choices: List[str] = []

    while True:
        user_text = input("User: ").strip()
        if not user_text:
            continue
        if user_text.lower() in {"exit", "quit"}:
            break

        activities = bot.on_turn(conversation_id, user_id, _resolve_choice(user_text, last_choices), user_name)
        last_choices = []
        for activity in activities:
            for attachment in activity.get("attachments") or []:
                last_choices = card_choices(attachment)
            text = format_activity(activity)
            if text:
                print(f"Bot: {text}\n")
