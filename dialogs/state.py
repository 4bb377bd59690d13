from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional, TypedDict

from pydantic import BaseModel


class Organization(str, Enum):
    KPMG = "KPMG"
    DELOITTE = "Deloitte"
    EY = "EY"
    PWC = "PWC"
    NOT_SUPPORTED = "NotSupported"

    @classmethod
    def parse(cls, value: Any) -> "Organization":
        """Case-insensitive lookup by name; anything unknown is NOT_SUPPORTED."""
        if not isinstance(value, str):
            return cls.NOT_SUPPORTED
        text = value.strip().lower()
        for member in cls:
            if member.value.lower() == text:
                return member
        return cls.NOT_SUPPORTED


class Intent(str, Enum):
    CAREER_QUESTION_TYPE = "CareerQuestionType"
    GREETING = "Greeting"
    NONE = "None"
    GO_BACK = "GoBack"
    FINISH = "Finish"


SUPPORTED_ORGANIZATIONS = (Organization.KPMG, Organization.DELOITTE, Organization.EY, Organization.PWC)
PIVOT_ORGANIZATIONS = (Organization.DELOITTE, Organization.EY, Organization.PWC)

QUESTION_TYPES = ("general", "application", "assessment", "interviews", "offer", "starting")

# Card button titles accepted when no classifier is available.
QUESTION_TYPE_CHOICES: Dict[str, str] = {
    "general questions": "general",
    "applying": "application",
    "assessment test": "assessment",
    "interviews": "interviews",
    "the offer stage": "offer",
    "starting new job": "starting",
}

KPMG_ANSWER_MIN_INTENT_SCORE = 0.8
KB_TOP = 3
KB_SCORE_THRESHOLD = 0.5


class ConversationMember(BaseModel):
    was_greeted: bool = False
    company: Organization = Organization.NOT_SUPPORTED
    question_type: Optional[str] = None


class DialogId(str, Enum):
    ROOT = "root"
    KPMG = "kpmg"


class FrameState(str, Enum):
    AWAITING_MENU_CHOICE = "awaiting_menu_choice"
    DELEGATED = "delegated"
    AWAITING_QUESTION_TYPE = "awaiting_question_type"
    AWAITING_QUESTION = "awaiting_question"


class PromptKind(str, Enum):
    MENU = "menu"
    QUESTION_TYPE = "question_type"
    QUESTION = "question"
    TEXT = "text"


class PendingPrompt(TypedDict, total=False):
    kind: str
    retry: Dict[str, Any]


class DialogFrame(TypedDict, total=False):
    dialog: str
    state: Optional[str]
    options: Optional[str]
    values: Dict[str, Any]
    prompt: PendingPrompt


class Route(TypedDict, total=False):
    node: str
    result: Any


class DialogState(TypedDict, total=False):
    conversation_id: str
    user_id: str
    user_name: str
    text: str
    member: Dict[str, Any]
    stack: List[DialogFrame]
    route: Route
    activities: List[Dict[str, Any]]
    messages: List[Any]
    conversation_complete: bool


ROOT_MENU_NODE = "root_menu"
ROOT_DELEGATE_NODE = "root_delegate"
ROOT_RESUME_NODE = "root_resume"
KPMG_QUESTION_TYPE_NODE = "kpmg_question_type"
KPMG_STORE_QUESTION_TYPE_NODE = "kpmg_store_question_type"
KPMG_ANSWER_NODE = "kpmg_answer_question"

DIALOG_ENTRY_NODES: Dict[str, str] = {
    DialogId.ROOT.value: ROOT_MENU_NODE,
    DialogId.KPMG.value: KPMG_QUESTION_TYPE_NODE,
}

# (dialog, frame state) -> node that receives the prompt answer or child result.
RESUME_NODES: Dict[tuple, str] = {
    (DialogId.ROOT.value, FrameState.AWAITING_MENU_CHOICE.value): ROOT_DELEGATE_NODE,
    (DialogId.ROOT.value, FrameState.DELEGATED.value): ROOT_RESUME_NODE,
    (DialogId.KPMG.value, FrameState.AWAITING_QUESTION_TYPE.value): KPMG_STORE_QUESTION_TYPE_NODE,
    (DialogId.KPMG.value, FrameState.AWAITING_QUESTION.value): KPMG_ANSWER_NODE,
}


def new_frame(dialog: str, options: Optional[str] = None) -> DialogFrame:
    return {"dialog": dialog, "state": None, "options": options, "values": {}}
