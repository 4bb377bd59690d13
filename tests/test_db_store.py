import sqlite3

from db_store import DBStore, MemoryStore
from dialogs.state import ConversationMember, Organization


def test_member_is_created_and_updated(tmp_path):
    store = DBStore(str(tmp_path / "nested" / "bot.db"))

    member = store.get_or_create_member("user/1")
    assert member == ConversationMember()

    member.was_greeted = True
    member.company = Organization.KPMG
    member.question_type = "offer"
    store.set_member("user/1", member)

    loaded = store.get_or_create_member("user/1")
    assert loaded.was_greeted is True
    assert loaded.company == Organization.KPMG
    assert loaded.question_type == "offer"


def test_corrupt_member_row_is_replaced(tmp_path):
    db_path = str(tmp_path / "bot.db")
    store = DBStore(db_path)
    with sqlite3.connect(db_path) as conn:
        conn.execute(
            "INSERT INTO conversation_members (member_key, member_json, updated_at) VALUES (?, ?, ?)",
            ("user/2", "{not json", 0),
        )

    assert store.get_or_create_member("user/2") == ConversationMember()


def test_conversation_state_round_trip(tmp_path):
    store = DBStore(str(tmp_path / "bot.db"))
    conversation_id = store.create_conversation()

    assert store.conversation_exists(conversation_id)
    assert store.get_conversation_state(conversation_id) == {}
    assert store.get_conversation_state("missing") is None

    state = {"stack": [{"dialog": "root", "state": "awaiting_menu_choice"}], "conversation_complete": False}
    store.update_conversation_state(conversation_id, state)
    store.update_conversation_state("console-1", {"stack": []})

    assert store.get_conversation_state(conversation_id) == state
    assert store.conversation_exists("console-1")


def test_memory_store_returns_copies():
    store = MemoryStore()
    conversation_id = store.create_conversation()
    store.update_conversation_state(conversation_id, {"stack": [{"dialog": "root"}]})

    state = store.get_conversation_state(conversation_id)
    state["stack"].append({"dialog": "kpmg"})

    assert store.get_conversation_state(conversation_id) == {"stack": [{"dialog": "root"}]}
    assert store.get_conversation_state("missing") is None
