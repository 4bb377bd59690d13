from __future__ import annotations

import copy
from typing import Any, Dict, List, Optional

from langgraph.graph import END

from .messages import message_activity, message_from_activity, typing_activity
from .state import (
    DIALOG_ENTRY_NODES,
    RESUME_NODES,
    ConversationMember,
    DialogFrame,
    DialogState,
    FrameState,
    PromptKind,
    new_frame,
)


class StepContext:
    """Working copy of the dialog state for one step of the active dialog.

    Steps read the turn input and the top frame, send activities, and finish
    with exactly one of ``prompt``, ``next``, ``begin_dialog``,
    ``replace_dialog`` or ``end_dialog``. Each of those returns the state
    update for the graph, including the route to the next node.
    """

    def __init__(self, state: DialogState, dialog_id: str) -> None:
        self.dialog_id = dialog_id
        self.stack: List[DialogFrame] = copy.deepcopy(list(state.get("stack") or []))
        if not self.stack or self.stack[-1].get("dialog") != dialog_id:
            raise RuntimeError(f"dialog '{dialog_id}' is not on top of the stack")

        self.text = str(state.get("text") or "")
        self.user_name = str(state.get("user_name") or "")
        self.member = ConversationMember.model_validate(state.get("member") or {})
        self.result = (state.get("route") or {}).get("result")
        self._activities: List[Dict[str, Any]] = list(state.get("activities") or [])
        self._messages: List[Any] = list(state.get("messages") or [])

    @property
    def frame(self) -> DialogFrame:
        return self.stack[-1]

    @property
    def options(self) -> Optional[str]:
        return self.frame.get("options")

    @property
    def values(self) -> Dict[str, Any]:
        return self.frame.setdefault("values", {})

    def enter(self, state: FrameState) -> None:
        self.frame["state"] = state.value

    def send(self, activity: Dict[str, Any]) -> None:
        self._activities.append(activity)
        message = message_from_activity(activity)
        if message is not None:
            self._messages.append(message)

    def send_text(self, text: str) -> None:
        self.send(message_activity(text))

    def send_typing(self) -> None:
        self.send(typing_activity())

    def _commit(self, node: str, result: Any = None, complete: bool = False) -> DialogState:
        return {
            "stack": self.stack,
            "member": self.member.model_dump(mode="json"),
            "activities": self._activities,
            "messages": self._messages,
            "route": {"node": node, "result": result},
            "conversation_complete": complete,
        }

    def _resume_node(self) -> str:
        key = (self.frame.get("dialog"), self.frame.get("state"))
        if key not in RESUME_NODES:
            raise RuntimeError(f"no step follows {key}")
        return RESUME_NODES[key]

    def prompt(
        self,
        kind: PromptKind,
        activity: Dict[str, Any],
        retry: Dict[str, Any] | None = None,
    ) -> DialogState:
        """Send ``activity`` and wait for the user's answer."""
        self.send(activity)
        self.frame["prompt"] = {"kind": kind.value, "retry": retry or activity}
        return self._commit(END)

    def next(self, result: Any = None) -> DialogState:
        return self._commit(self._resume_node(), result)

    def begin_dialog(self, dialog_id: str, options: Optional[str] = None) -> DialogState:
        self.stack.append(new_frame(dialog_id, options))
        return self._commit(DIALOG_ENTRY_NODES[dialog_id])

    def replace_dialog(self, dialog_id: str, options: Optional[str] = None) -> DialogState:
        self.stack.pop()
        return self.begin_dialog(dialog_id, options)

    def end_dialog(self, result: Any = None) -> DialogState:
        self.stack.pop()
        if not self.stack:
            return self._commit(END, result, complete=True)
        return self._commit(self._resume_node(), result)
