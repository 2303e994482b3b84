from __future__ import annotations

from local_store import DOCUMENTS_KEY, NAME_USAGE_KEY, PROFILE_KEY, LocalStore
from models import Profile, SignificantPerson
from services.document_service import ClinicalDocument
from services.profile_service import ProfileStore


def _profile(**overrides) -> Profile:
    values = {
        "preferred_name": "Sam",
        "pronouns": "they/them",
        "communication_style": ("Gentle and nurturing",),
        "significant_people": (SignificantPerson("Alex", "partner"),),
    }
    values.update(overrides)
    return Profile(**values)


def test_save_and_reload(store: LocalStore) -> None:
    profiles = ProfileStore(store)
    assert profiles.save(_profile()) is True

    restored = ProfileStore(store)
    restored.load()

    assert restored.profile == _profile()
    assert restored.has_profile() is True
    assert restored.greeting() == "Hi, Sam"


def test_greeting_without_profile(store: LocalStore) -> None:
    assert ProfileStore(store).greeting() == "Hi, I'm Talbot"


def test_name_pacing_counts_user_turns_and_resets_on_use(store: LocalStore) -> None:
    profiles = ProfileStore(store, name_usage_interval=3)
    profiles.save(_profile())

    for _ in range(3):
        profiles.note_user_turn()
    assert profiles.should_use_name() is True

    assert profiles.record_reply("That sounds heavy, SAM.") is True
    usage = profiles.name_usage
    assert usage.messages_since_last_name == 0
    assert usage.total_usage_count == 1
    assert profiles.should_use_name() is False

    assert profiles.record_reply("Tell me more.") is False


def test_name_usage_is_persisted_and_reset_on_save(store: LocalStore) -> None:
    profiles = ProfileStore(store)
    profiles.save(_profile())
    profiles.note_user_turn()
    profiles.note_user_turn()

    restored = ProfileStore(store)
    restored.load()
    assert restored.name_usage.messages_since_last_name == 2

    restored.save(_profile(preferred_name="Jo"))
    assert restored.name_usage.messages_since_last_name == 0
    assert store.get(NAME_USAGE_KEY) == {"totalUsageCount": 0, "messagesSinceLastName": 0}


def test_context_text_lists_profile_documents_and_guidance(store: LocalStore) -> None:
    profiles = ProfileStore(store)
    profiles.save(_profile(therapy_goals="Sleep better"))
    profiles.add_document(ClinicalDocument(name="plan.txt", size=10, mime="text/plain", content="Safety plan"))

    text = profiles.context_text()

    assert text.startswith("User Profile:")
    assert "- User's name: Sam" in text
    assert "- Communication preferences: Gentle and nurturing" in text
    assert "- Important people: Alex (partner)" in text
    assert "- Current therapy goals: Sleep better" in text
    assert "plan.txt: Safety plan" in text
    assert "Name guidance" in text


def test_context_text_empty_without_profile(store: LocalStore) -> None:
    assert ProfileStore(store).context_text() == ""


def test_clear_removes_everything(store: LocalStore) -> None:
    profiles = ProfileStore(store)
    profiles.save(_profile())
    profiles.add_document(ClinicalDocument(name="a.txt", size=1, mime="text/plain", content="a"))

    profiles.clear()

    assert profiles.profile is None
    assert profiles.documents == ()
    for key in (PROFILE_KEY, DOCUMENTS_KEY, NAME_USAGE_KEY):
        assert store.get(key) is None


def test_remove_document(store: LocalStore) -> None:
    profiles = ProfileStore(store)
    document = ClinicalDocument(name="a.txt", size=1, mime="text/plain", content="a")
    profiles.add_document(document)

    assert profiles.remove_document("nope") is False
    assert profiles.remove_document(document.id) is True
    assert profiles.documents == ()
