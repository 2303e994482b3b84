"""Shared dataclasses for the conversation core and its persisted state."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping, Sequence


class Sender(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class SendSource(str, Enum):
    """Where a send request originated."""

    CLICK = "click"
    ENTER_KEY = "enterKey"
    VOICE = "voice"


class EmotionalTone(str, Enum):
    ANXIOUS = "anxious"
    SAD = "sad"
    ANGRY = "angry"
    POSITIVE = "positive"
    NEUTRAL = "neutral"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_message_id() -> str:
    return uuid.uuid4().hex


def _parse_timestamp(raw: Any) -> datetime:
    if isinstance(raw, datetime):
        return raw
    if isinstance(raw, (int, float)):
        # Millisecond epochs come from older exports.
        seconds = raw / 1000 if raw > 1e11 else raw
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    if isinstance(raw, str) and raw.strip():
        text = raw.strip()
        if text.endswith("Z"):
            text = f"{text[:-1]}+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            pass
    return utc_now()


def _string_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, Sequence):
        return [str(item).strip() for item in value if str(item).strip()]
    return []


@dataclass(frozen=True)
class Message:
    """A single entry in the conversation log."""

    sender: Sender
    content: str
    id: str = field(default_factory=new_message_id)
    timestamp: datetime = field(default_factory=utc_now)
    edited: bool = False

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Message":
        sender_raw = str(payload.get("sender") or "").lower()
        sender = Sender.ASSISTANT if sender_raw in {"assistant", "bot", "talbot"} else Sender.USER
        message_id = str(payload.get("id") or new_message_id())
        return cls(
            sender=sender,
            content=str(payload.get("content") or ""),
            id=message_id,
            timestamp=_parse_timestamp(payload.get("timestamp")),
            edited=bool(payload.get("edited", False)),
        )

    def asdict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "sender": self.sender.value,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.edited:
            payload["edited"] = True
        return payload

    def as_history_entry(self) -> dict[str, str]:
        return {"sender": self.sender.value, "content": self.content}


@dataclass(frozen=True)
class SignificantPerson:
    name: str
    relationship: str = ""

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "SignificantPerson":
        return cls(
            name=str(payload.get("name") or "").strip(),
            relationship=str(payload.get("relationship") or "").strip(),
        )

    def asdict(self) -> dict[str, str]:
        return {"name": self.name, "relationship": self.relationship}


@dataclass(frozen=True)
class Profile:
    """User identity and clinical context. Replaced wholesale on every save."""

    preferred_name: str = ""
    pronouns: str = ""
    age_range: str = ""
    diagnoses: str = ""
    medications: str = ""
    treatment_history: str = ""
    communication_style: tuple[str, ...] = field(default_factory=tuple)
    custom_communication: str = ""
    triggers: str = ""
    therapy_goals: str = ""
    coping_strategies: str = ""
    current_stressors: str = ""
    therapist_info: str = ""
    significant_people: tuple[SignificantPerson, ...] = field(default_factory=tuple)
    profile_photo: str | None = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Profile":
        def text(key: str) -> str:
            value = payload.get(key)
            return str(value).strip() if value is not None else ""

        people_field = payload.get("significantPeople") or []
        people: list[SignificantPerson] = []
        if isinstance(people_field, Sequence) and not isinstance(people_field, str):
            for entry in people_field:
                if isinstance(entry, Mapping):
                    person = SignificantPerson.from_dict(entry)
                    if person.name:
                        people.append(person)
        photo = payload.get("profilePhoto")
        return cls(
            preferred_name=text("preferredName"),
            pronouns=text("pronouns"),
            age_range=text("ageRange"),
            diagnoses=text("diagnoses"),
            medications=text("medications"),
            treatment_history=text("treatmentHistory"),
            communication_style=tuple(_string_list(payload.get("communicationStyle"))),
            custom_communication=text("customCommunication"),
            triggers=text("triggers"),
            therapy_goals=text("therapyGoals"),
            coping_strategies=text("copingStrategies"),
            current_stressors=text("currentStressors"),
            therapist_info=text("therapistInfo"),
            significant_people=tuple(people),
            profile_photo=photo if isinstance(photo, str) and photo else None,
        )

    def asdict(self) -> dict[str, Any]:
        """Return the persisted shape, omitting empty fields."""

        payload: dict[str, Any] = {
            "preferredName": self.preferred_name,
            "pronouns": self.pronouns,
            "ageRange": self.age_range,
            "diagnoses": self.diagnoses,
            "medications": self.medications,
            "treatmentHistory": self.treatment_history,
            "customCommunication": self.custom_communication,
            "triggers": self.triggers,
            "therapyGoals": self.therapy_goals,
            "copingStrategies": self.coping_strategies,
            "currentStressors": self.current_stressors,
            "therapistInfo": self.therapist_info,
        }
        payload = {key: value for key, value in payload.items() if value}
        if self.communication_style:
            payload["communicationStyle"] = list(self.communication_style)
        if self.significant_people:
            payload["significantPeople"] = [person.asdict() for person in self.significant_people]
        if self.profile_photo:
            payload["profilePhoto"] = self.profile_photo
        return payload

    def is_empty(self) -> bool:
        return not self.asdict()


@dataclass
class NameUsageState:
    total_usage_count: int = 0
    messages_since_last_name: int = 0

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any] | None) -> "NameUsageState":
        if not payload:
            return cls()

        def count(key: str) -> int:
            try:
                return max(0, int(payload.get(key) or 0))
            except (TypeError, ValueError):
                return 0

        return cls(
            total_usage_count=count("totalUsageCount"),
            messages_since_last_name=count("messagesSinceLastName"),
        )

    def asdict(self) -> dict[str, int]:
        return {
            "totalUsageCount": self.total_usage_count,
            "messagesSinceLastName": self.messages_since_last_name,
        }


@dataclass(frozen=True)
class ConversationMemory:
    """Compact summary of a finished conversation."""

    last_updated: datetime
    message_count_at_save: int
    topics: tuple[str, ...]
    summary: str
    emotional_tone: EmotionalTone = EmotionalTone.NEUTRAL
    key_themes: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ConversationMemory":
        tone_raw = str(payload.get("emotionalTone") or EmotionalTone.NEUTRAL.value)
        try:
            tone = EmotionalTone(tone_raw)
        except ValueError:
            tone = EmotionalTone.NEUTRAL
        try:
            count = int(payload.get("messageCount") or payload.get("messageCountAtSave") or 0)
        except (TypeError, ValueError):
            count = 0
        return cls(
            last_updated=_parse_timestamp(payload.get("lastUpdated")),
            message_count_at_save=count,
            topics=tuple(_string_list(payload.get("topics"))),
            summary=str(payload.get("summary") or ""),
            emotional_tone=tone,
            key_themes=tuple(_string_list(payload.get("keyThemes"))),
        )

    def asdict(self) -> dict[str, Any]:
        return {
            "lastUpdated": self.last_updated.isoformat(),
            "messageCount": self.message_count_at_save,
            "topics": list(self.topics),
            "summary": self.summary,
            "emotionalTone": self.emotional_tone.value,
            "keyThemes": list(self.key_themes),
        }


@dataclass(frozen=True)
class MessageStats:
    total: int
    user_count: int
    assistant_count: int
    avg_user_len: float
    avg_assistant_len: float
    first_timestamp: datetime | None
    last_timestamp: datetime | None

    def asdict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "userCount": self.user_count,
            "assistantCount": self.assistant_count,
            "avgUserLen": self.avg_user_len,
            "avgAssistantLen": self.avg_assistant_len,
            "firstTimestamp": self.first_timestamp.isoformat() if self.first_timestamp else None,
            "lastTimestamp": self.last_timestamp.isoformat() if self.last_timestamp else None,
        }


__all__ = [
    "ConversationMemory",
    "EmotionalTone",
    "Message",
    "MessageStats",
    "NameUsageState",
    "Profile",
    "SendSource",
    "Sender",
    "SignificantPerson",
    "new_message_id",
    "utc_now",
]
