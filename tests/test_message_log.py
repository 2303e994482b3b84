from __future__ import annotations

from pathlib import Path

from local_store import CHAT_HISTORY_KEY, LocalStore
from models import Sender
from services.message_log import MessageLog


def test_append_keeps_insertion_order(store: LocalStore) -> None:
    log = MessageLog(store)
    first = log.append(Sender.USER, "hello")
    second = log.append("assistant", "hi there")

    assert [message.id for message in log.all()] == [first.id, second.id]
    assert log.last() == second
    assert len(log) == 2
    assert log.shows_welcome is False


def test_blank_content_is_ignored(store: LocalStore) -> None:
    log = MessageLog(store)

    assert log.append(Sender.USER, "   ") is None
    assert log.append(Sender.USER, "") is None
    assert log.all() == ()
    assert log.shows_welcome is True


def test_reload_reproduces_history_verbatim(store: LocalStore) -> None:
    log = MessageLog(store)
    log.append(Sender.USER, "I'm worried about tomorrow")
    log.append(Sender.ASSISTANT, "What's worrying you most?")

    restored = MessageLog(store)
    restored.load()

    assert restored.all() == log.all()


def test_clear_empties_memory_and_storage(store: LocalStore) -> None:
    log = MessageLog(store)
    log.append(Sender.USER, "hello")

    log.clear()

    assert log.all() == ()
    assert store.get(CHAT_HISTORY_KEY) is None
    fresh = MessageLog(store)
    fresh.load()
    assert fresh.all() == ()
    assert fresh.shows_welcome is True


def test_reload_from_reopened_durable_store(tmp_path: Path) -> None:
    first = LocalStore.open(tmp_path)
    log = MessageLog(first)
    log.append(Sender.USER, "I'm worried about tomorrow")
    log.append(Sender.ASSISTANT, "What's worrying you most?")
    expected = log.all()
    first.close()

    reopened = LocalStore.open(tmp_path)
    try:
        restored = MessageLog(reopened)
        restored.load()
        assert restored.all() == expected
    finally:
        reopened.close()


def test_clear_survives_reopening_durable_store(tmp_path: Path) -> None:
    first = LocalStore.open(tmp_path)
    log = MessageLog(first)
    log.append(Sender.USER, "hello")
    log.clear()
    first.close()

    reopened = LocalStore.open(tmp_path)
    try:
        fresh = MessageLog(reopened)
        fresh.load()
        assert fresh.all() == ()
        assert fresh.shows_welcome is True
    finally:
        reopened.close()


def test_load_skips_duplicate_ids_and_blank_entries(store: LocalStore) -> None:
    store.put(
        CHAT_HISTORY_KEY,
        [
            {"id": "a", "sender": "user", "content": "one", "timestamp": "2025-01-01T10:00:00Z"},
            {"id": "a", "sender": "user", "content": "one again"},
            {"id": "b", "sender": "assistant", "content": "  "},
            "not a message",
            {"id": "c", "sender": "bot", "content": "two"},
        ],
    )
    log = MessageLog(store)
    log.load()

    assert [(message.id, message.sender) for message in log.all()] == [("a", Sender.USER), ("c", Sender.ASSISTANT)]


def test_edit_and_delete(store: LocalStore) -> None:
    log = MessageLog(store)
    message = log.append(Sender.USER, "helo")

    edited = log.edit(message.id, "hello")
    assert edited is not None and edited.edited is True
    assert log.all()[0].content == "hello"

    assert log.delete("missing") is False
    assert log.delete(message.id) is True
    assert log.all() == ()


def test_stats_reports_counts_and_averages(store: LocalStore) -> None:
    log = MessageLog(store)
    first = log.append(Sender.USER, "abcd")
    log.append(Sender.USER, "ab")
    last = log.append(Sender.ASSISTANT, "abcdef")

    stats = log.stats()

    assert stats.total == 3
    assert stats.user_count == 2
    assert stats.assistant_count == 1
    assert stats.avg_user_len == 3.0
    assert stats.avg_assistant_len == 6.0
    assert stats.first_timestamp == first.timestamp
    assert stats.last_timestamp == last.timestamp


def test_stats_on_empty_log(store: LocalStore) -> None:
    stats = MessageLog(store).stats()

    assert stats.total == 0
    assert stats.avg_user_len == 0.0
    assert stats.first_timestamp is None
