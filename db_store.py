from __future__ import annotations

import copy
import json
import sqlite3
import threading
import time
import uuid
from pathlib import Path
from typing import Any

from dialogs.state import ConversationMember


class DBStore:
    """SQLite storage for conversation members and dialog state."""

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        self._lock = threading.Lock()
        db_file = Path(db_path)
        db_file.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=30, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS conversation_members (
                  member_key TEXT PRIMARY KEY,
                  member_json TEXT NOT NULL,
                  updated_at INTEGER NOT NULL
                );

                CREATE TABLE IF NOT EXISTS conversations (
                  id TEXT PRIMARY KEY,
                  state_json TEXT NOT NULL,
                  created_at INTEGER NOT NULL,
                  updated_at INTEGER NOT NULL
                );
                """
            )

    def get_or_create_member(self, key: str) -> ConversationMember:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT member_json FROM conversation_members WHERE member_key = ?",
                (key,),
            ).fetchone()
        if row:
            try:
                return ConversationMember.model_validate_json(str(row["member_json"]))
            except ValueError:
                pass
        member = ConversationMember()
        self.set_member(key, member)
        return member

    def set_member(self, key: str, member: ConversationMember) -> None:
        now = int(time.time())
        with self._lock, self._connect() as conn:
            conn.execute(
                """
                INSERT INTO conversation_members (member_key, member_json, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(member_key) DO UPDATE SET
                  member_json = excluded.member_json,
                  updated_at = excluded.updated_at
                """,
                (key, member.model_dump_json(), now),
            )
            conn.commit()

    def create_conversation(self) -> str:
        now = int(time.time())
        conversation_id = str(uuid.uuid4())
        with self._lock, self._connect() as conn:
            conn.execute(
                "INSERT INTO conversations (id, state_json, created_at, updated_at) VALUES (?, ?, ?, ?)",
                (conversation_id, json.dumps({}), now, now),
            )
            conn.commit()
        return conversation_id

    def conversation_exists(self, conversation_id: str) -> bool:
        with self._connect() as conn:
            row = conn.execute("SELECT 1 FROM conversations WHERE id = ?", (conversation_id,)).fetchone()
        return row is not None

    def get_conversation_state(self, conversation_id: str) -> dict[str, Any] | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT state_json FROM conversations WHERE id = ?",
                (conversation_id,),
            ).fetchone()
        if not row:
            return None
        try:
            parsed = json.loads(str(row["state_json"]))
        except ValueError:
            return None
        return parsed if isinstance(parsed, dict) else None

    def update_conversation_state(self, conversation_id: str, state: dict[str, Any]) -> None:
        now = int(time.time())
        state_json = json.dumps(state, ensure_ascii=False)
        with self._lock, self._connect() as conn:
            conn.execute(
                """
                INSERT INTO conversations (id, state_json, created_at, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                  state_json = excluded.state_json,
                  updated_at = excluded.updated_at
                """,
                (conversation_id, state_json, now, now),
            )
            conn.commit()


class MemoryStore:
    """Process-local store with the same interface as ``DBStore``."""

    def __init__(self) -> None:
        self._members: dict[str, dict[str, Any]] = {}
        self._conversations: dict[str, dict[str, Any]] = {}

    def get_or_create_member(self, key: str) -> ConversationMember:
        if key not in self._members:
            self._members[key] = ConversationMember().model_dump(mode="json")
        return ConversationMember.model_validate(self._members[key])

    def set_member(self, key: str, member: ConversationMember) -> None:
        self._members[key] = member.model_dump(mode="json")

    def create_conversation(self) -> str:
        conversation_id = str(uuid.uuid4())
        self._conversations[conversation_id] = {}
        return conversation_id

    def conversation_exists(self, conversation_id: str) -> bool:
        return conversation_id in self._conversations

    def get_conversation_state(self, conversation_id: str) -> dict[str, Any] | None:
        state = self._conversations.get(conversation_id)
        return copy.deepcopy(state) if state is not None else None

    def update_conversation_state(self, conversation_id: str, state: dict[str, Any]) -> None:
        self._conversations[conversation_id] = copy.deepcopy(state)
