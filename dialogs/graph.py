from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Tuple

from langgraph.graph import END, StateGraph

from langsmith_integration import LangSmithLogger, get_default_logger
from localization import StringResource

from .cards import CardRenderer
from .kpmg_flow import KpmgCareerDialog
from .messages import Send, message_from_activity
from .root_flow import RootDialog
from .state import (
    DIALOG_ENTRY_NODES,
    KPMG_ANSWER_NODE,
    KPMG_QUESTION_TYPE_NODE,
    KPMG_STORE_QUESTION_TYPE_NODE,
    RESUME_NODES,
    ROOT_DELEGATE_NODE,
    ROOT_MENU_NODE,
    ROOT_RESUME_NODE,
    DialogId,
    DialogState,
    PromptKind,
    new_frame,
)

DISPATCH_NODE = "dispatch"

Validator = Callable[[str, Send], Tuple[bool, Optional[str]]]


def recognize_text(text: str, send: Send) -> Tuple[bool, Optional[str]]:
    value = (text or "").strip()
    return bool(value), value or None


def follow_route(state: DialogState) -> str:
    return (state.get("route") or {}).get("node") or END


def build_dialog_graph(
    recognizer: Any = None,
    knowledge_base: Any = None,
    strings: StringResource | None = None,
    cards: CardRenderer | None = None,
    logger: LangSmithLogger | None = None,
) -> StateGraph:
    strings = strings or StringResource()
    cards = cards or CardRenderer()
    logger = logger or get_default_logger()

    root = RootDialog(recognizer, strings, cards)
    kpmg = KpmgCareerDialog(recognizer, knowledge_base, strings, cards)

    validators: Dict[str, Validator] = {
        PromptKind.MENU.value: root.recognize_menu_choice,
        PromptKind.QUESTION_TYPE.value: kpmg.recognize_question_type,
        PromptKind.QUESTION.value: recognize_text,
        PromptKind.TEXT.value: recognize_text,
    }

    def begin_root() -> DialogState:
        return {
            "stack": [new_frame(DialogId.ROOT.value)],
            "route": {"node": DIALOG_ENTRY_NODES[DialogId.ROOT.value], "result": None},
            "conversation_complete": False,
        }

    def dispatch_node(state: DialogState) -> DialogState:
        """Feed the user's message to whatever the conversation is waiting on."""
        stack = list(state.get("stack") or [])
        if not stack:
            return begin_root()

        frame = dict(stack[-1])
        prompt = frame.get("prompt") or {}
        validator = validators.get(str(prompt.get("kind", "")))
        resume_node = RESUME_NODES.get((frame.get("dialog"), frame.get("state")))
        if validator is None or resume_node is None:
            logger.log_event("dispatch_reset", {"frame": frame})
            return begin_root()

        activities = list(state.get("activities") or [])
        messages = list(state.get("messages") or [])

        def send(activity: Dict[str, Any]) -> None:
            activities.append(activity)
            message = message_from_activity(activity)
            if message is not None:
                messages.append(message)

        accepted, value = validator(str(state.get("text") or ""), send)
        if not accepted:
            send(dict(prompt.get("retry") or {}))
            return {"activities": activities, "messages": messages, "route": {"node": END, "result": None}}

        frame.pop("prompt", None)
        stack[-1] = frame
        return {
            "stack": stack,
            "activities": activities,
            "messages": messages,
            "route": {"node": resume_node, "result": value},
        }

    def wrap_node(name: str, fn):
        def _wrapped(state: DialogState):
            logger.log_event(f"node_started:{name}", {"stack_depth": len(state.get("stack") or [])})
            try:
                res = fn(state)
            except Exception as exc:
                logger.log_event(f"node_error:{name}", {"error": str(exc)})
                raise
            logger.log_event(f"node_finished:{name}", {"route": res.get("route")})
            return res

        return _wrapped

    nodes = {
        DISPATCH_NODE: dispatch_node,
        ROOT_MENU_NODE: root.menu_step,
        ROOT_DELEGATE_NODE: root.delegate_step,
        ROOT_RESUME_NODE: root.resume_step,
        KPMG_QUESTION_TYPE_NODE: kpmg.question_type_step,
        KPMG_STORE_QUESTION_TYPE_NODE: kpmg.store_question_type_step,
        KPMG_ANSWER_NODE: kpmg.answer_step,
    }
    path_map = {name: name for name in nodes if name != DISPATCH_NODE}
    path_map[END] = END

    graph = StateGraph(DialogState)
    for name, fn in nodes.items():
        graph.add_node(name, wrap_node(name, fn))

    graph.set_entry_point(DISPATCH_NODE)
    for name in nodes:
        graph.add_conditional_edges(name, follow_route, path_map)

    return graph
