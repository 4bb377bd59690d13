from __future__ import annotations

import threading
from functools import lru_cache
from typing import Any

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from config import load_settings
from db_store import DBStore
from dialogs.runner import CareersBot

settings = load_settings()

app = FastAPI(title="careers-bot API", version="1.0.0")

allowed_origins = [origin.strip() for origin in settings.frontend_origin.split(",") if origin.strip()]
if not allowed_origins:
    allowed_origins = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Turns are processed one at a time.
_turn_lock = threading.Lock()


@lru_cache(maxsize=1)
def get_bot() -> CareersBot:
    return CareersBot.from_settings(DBStore(settings.db_path), settings)


class ConversationCreateResponse(BaseModel):
    conversation_id: str


class ActivityRequest(BaseModel):
    text: str = Field(min_length=1)
    user_id: str = Field(default="anonymous", min_length=1, max_length=128)
    user_name: str = Field(default="", max_length=64)


class ActivityResponse(BaseModel):
    conversation_id: str
    activities: list[dict[str, Any]] = Field(default_factory=list)
    conversation_complete: bool = False


class ConversationResponse(BaseModel):
    conversation_id: str
    messages: list[dict[str, Any]] = Field(default_factory=list)
    dialog_stack: list[dict[str, Any]] = Field(default_factory=list)
    conversation_complete: bool = False


@app.get("/api/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/api/v1/conversations", response_model=ConversationCreateResponse)
def create_conversation(bot: CareersBot = Depends(get_bot)) -> ConversationCreateResponse:
    return ConversationCreateResponse(conversation_id=bot.store.create_conversation())


@app.post("/api/v1/conversations/{conversation_id}/activities", response_model=ActivityResponse)
def post_activity(
    conversation_id: str,
    payload: ActivityRequest,
    bot: CareersBot = Depends(get_bot),
) -> ActivityResponse:
    if not bot.store.conversation_exists(conversation_id):
        raise HTTPException(status_code=404, detail="Conversation not found")

    text = payload.text.strip()
    if not text:
        raise HTTPException(status_code=422, detail="Message text is required")

    with _turn_lock:
        activities = bot.on_turn(
            conversation_id,
            payload.user_id.strip(),
            text,
            user_name=payload.user_name.strip(),
        )
        state = bot.store.get_conversation_state(conversation_id) or {}

    return ActivityResponse(
        conversation_id=conversation_id,
        activities=activities,
        conversation_complete=bool(state.get("conversation_complete", False)),
    )


@app.get("/api/v1/conversations/{conversation_id}", response_model=ConversationResponse)
def get_conversation(conversation_id: str, bot: CareersBot = Depends(get_bot)) -> ConversationResponse:
    state = bot.store.get_conversation_state(conversation_id)
    if state is None:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return ConversationResponse(
        conversation_id=conversation_id,
        messages=list(state.get("messages", [])),
        dialog_stack=list(state.get("stack", [])),
        conversation_complete=bool(state.get("conversation_complete", False)),
    )
