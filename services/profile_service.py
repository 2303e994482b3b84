"""Singleton user profile, clinical documents and name-usage pacing."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from local_store import DOCUMENTS_KEY, NAME_USAGE_KEY, PROFILE_KEY, LocalStore
from models import NameUsageState, Profile
from persona import WELCOME_TITLE
from services.document_service import ClinicalDocument


logger = logging.getLogger(__name__)

NAME_USAGE_INTERVAL = 5
DOCUMENT_CONTEXT_CHARS = 2000


def _trim(text: str, limit: int) -> str:
    snippet = (text or "").strip()
    if len(snippet) > limit:
        snippet = f"{snippet[:limit].rstrip()}…"
    return snippet


class ProfileStore:
    """Holds at most one active profile plus its name-usage counters."""

    def __init__(self, store: LocalStore, *, name_usage_interval: int = NAME_USAGE_INTERVAL) -> None:
        self._store = store
        self._name_usage_interval = max(1, name_usage_interval)
        self._profile: Profile | None = None
        self._documents: list[ClinicalDocument] = []
        self._name_usage = NameUsageState()

    # Persistence ---------------------------------------------------------
    def load(self) -> None:
        raw_profile = self._store.get(PROFILE_KEY)
        if isinstance(raw_profile, Mapping):
            profile = Profile.from_dict(raw_profile)
            self._profile = None if profile.is_empty() else profile
        else:
            self._profile = None

        raw_documents = self._store.get(DOCUMENTS_KEY, [])
        documents: list[ClinicalDocument] = []
        if isinstance(raw_documents, Sequence) and not isinstance(raw_documents, str):
            documents = [ClinicalDocument.from_dict(entry) for entry in raw_documents if isinstance(entry, Mapping)]
        self._documents = documents

        raw_usage = self._store.get(NAME_USAGE_KEY)
        self._name_usage = NameUsageState.from_dict(raw_usage if isinstance(raw_usage, Mapping) else None)
        logger.debug(
            "Profile loaded (present=%s, documents=%s)", self._profile is not None, len(self._documents)
        )

    def _persist_documents(self) -> None:
        if not self._store.put(DOCUMENTS_KEY, [document.asdict() for document in self._documents]):
            logger.warning("Clinical documents kept in memory only; persistence failed.")

    def _persist_name_usage(self) -> None:
        if not self._store.put(NAME_USAGE_KEY, self._name_usage.asdict()):
            logger.warning("Name usage counters kept in memory only; persistence failed.")

    # Profile -------------------------------------------------------------
    @property
    def profile(self) -> Profile | None:
        return self._profile

    def has_profile(self) -> bool:
        return self._profile is not None

    @property
    def preferred_name(self) -> str:
        return self._profile.preferred_name if self._profile else ""

    def save(self, profile: Profile) -> bool:
        """Replace the active profile. Name usage pacing restarts from zero."""

        self._profile = None if profile.is_empty() else profile
        self._name_usage = NameUsageState()
        self._persist_name_usage()
        saved = self._store.put(PROFILE_KEY, profile.asdict())
        saved = self._store.put(DOCUMENTS_KEY, [document.asdict() for document in self._documents]) and saved
        if not saved:
            logger.warning("Profile kept in memory only; persistence failed.")
        return saved

    def clear(self) -> None:
        self._profile = None
        self._documents = []
        self._name_usage = NameUsageState()
        for key in (PROFILE_KEY, DOCUMENTS_KEY, NAME_USAGE_KEY):
            self._store.remove(key)

    def greeting(self) -> str:
        if self.preferred_name:
            return f"Hi, {self.preferred_name}"
        return WELCOME_TITLE

    # Documents -----------------------------------------------------------
    @property
    def documents(self) -> tuple[ClinicalDocument, ...]:
        return tuple(self._documents)

    def add_document(self, document: ClinicalDocument) -> None:
        self._documents.append(document)
        self._persist_documents()

    def remove_document(self, document_id: str) -> bool:
        remaining = [document for document in self._documents if document.id != document_id]
        if len(remaining) == len(self._documents):
            return False
        self._documents = remaining
        self._persist_documents()
        return True

    # Name usage ----------------------------------------------------------
    @property
    def name_usage(self) -> NameUsageState:
        return NameUsageState(
            total_usage_count=self._name_usage.total_usage_count,
            messages_since_last_name=self._name_usage.messages_since_last_name,
        )

    def note_user_turn(self) -> None:
        self._name_usage.messages_since_last_name += 1
        self._persist_name_usage()

    def record_reply(self, reply: str) -> bool:
        """Reset the pacing counter when ``reply`` mentions the user's name."""

        name = self.preferred_name.strip().lower()
        if not name or name not in (reply or "").lower():
            return False
        self._name_usage.messages_since_last_name = 0
        self._name_usage.total_usage_count += 1
        self._persist_name_usage()
        return True

    def should_use_name(self) -> bool:
        if not self.preferred_name:
            return False
        return self._name_usage.messages_since_last_name >= self._name_usage_interval

    # Prompt rendering ----------------------------------------------------
    def context_text(self) -> str:
        """Render the profile as a plain-text block for the outbound prompt."""

        profile = self._profile
        if profile is None and not self._documents:
            return ""

        lines: list[str] = []
        if profile is not None:
            fields: list[tuple[str, Any]] = [
                ("User's name", profile.preferred_name),
                ("Pronouns", profile.pronouns),
                ("Age", profile.age_range),
                ("Mental health conditions", profile.diagnoses),
                ("Current medications", profile.medications),
                ("Treatment background", profile.treatment_history),
                ("Communication preferences", ", ".join(profile.communication_style)),
                ("Custom communication style", profile.custom_communication),
                ("Topics to approach carefully", profile.triggers),
                ("Current therapy goals", profile.therapy_goals),
                ("Effective coping strategies", profile.coping_strategies),
                ("Current stressors", profile.current_stressors),
                ("Therapist information", profile.therapist_info),
            ]
            lines.extend(f"- {label}: {value}" for label, value in fields if value)
            if profile.significant_people:
                people = "; ".join(
                    f"{person.name} ({person.relationship})" if person.relationship else person.name
                    for person in profile.significant_people
                )
                lines.append(f"- Important people: {people}")

        if self._documents:
            lines.append("- Clinical documentation:")
            for document in self._documents:
                lines.append(f"  * {document.name}: {_trim(document.content, DOCUMENT_CONTEXT_CHARS)}")

        if profile is not None and profile.preferred_name:
            if self.should_use_name():
                lines.append(
                    f"- Name guidance: it has been {self._name_usage.messages_since_last_name} messages since "
                    f"you used their name; use \"{profile.preferred_name}\" naturally in this reply."
                )
            else:
                lines.append("- Name guidance: you used their name recently; avoid repeating it in this reply.")

        if not lines:
            return ""
        return "User Profile:\n" + "\n".join(lines)


__all__ = ["NAME_USAGE_INTERVAL", "ProfileStore"]
