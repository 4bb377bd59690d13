from __future__ import annotations

from typing import Any, Callable, Dict, List

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from .cards import card_text

# Callback a prompt validator uses to send activities during validation.
Send = Callable[[Dict[str, Any]], None]


def message_activity(text: str) -> Dict[str, Any]:
    return {"type": "message", "text": text}


def card_activity(attachment: Dict[str, Any]) -> Dict[str, Any]:
    return {"type": "message", "attachments": [attachment]}


def typing_activity() -> Dict[str, Any]:
    return {"type": "typing"}


def message_from_activity(activity: Dict[str, Any]) -> AIMessage | None:
    if activity.get("type") != "message":
        return None
    attachments = list(activity.get("attachments") or [])
    if attachments:
        content = "\n".join(card_text(item) for item in attachments)
        return AIMessage(content=content, additional_kwargs={"attachments": attachments})
    return AIMessage(content=str(activity.get("text", "")))


def _openai_role_from_type(msg_type: str | None) -> str:
    if msg_type == "human":
        return "user"
    if msg_type == "system":
        return "system"
    return "assistant"


def openai_from_lc_message(message: BaseMessage) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "role": _openai_role_from_type(getattr(message, "type", None)),
        "content": str(message.content),
    }
    attachments = message.additional_kwargs.get("attachments")
    if attachments:
        out["attachments"] = attachments
    return out


def lc_from_openai_message(message: Dict[str, Any]) -> BaseMessage:
    role = str(message.get("role", "user")).lower()
    content = str(message.get("content", ""))
    if role == "system":
        return SystemMessage(content=content)
    if role == "assistant":
        attachments = message.get("attachments")
        if attachments:
            return AIMessage(content=content, additional_kwargs={"attachments": attachments})
        return AIMessage(content=content)
    return HumanMessage(content=content)


def is_openai_message(obj: Any) -> bool:
    return isinstance(obj, dict) and "role" in obj and "content" in obj


def normalize_messages(messages: Any) -> List[BaseMessage]:
    if not isinstance(messages, list):
        return []
    normalized: List[BaseMessage] = []
    for msg in messages:
        if isinstance(msg, BaseMessage):
            normalized.append(msg)
        elif is_openai_message(msg):
            normalized.append(lc_from_openai_message(msg))
    return normalized


def serialize_messages_openai(messages: Any) -> List[Dict[str, Any]]:
    if not isinstance(messages, list):
        return []
    out: List[Dict[str, Any]] = []
    for msg in messages:
        if isinstance(msg, BaseMessage):
            out.append(openai_from_lc_message(msg))
        elif is_openai_message(msg):
            out.append(dict(msg))
    return out
