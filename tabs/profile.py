"""Profile tab renderer."""

from __future__ import annotations

import base64
import logging
from typing import Any

import streamlit as st

from models import Profile, SignificantPerson
from services.document_service import format_file_size, ingest_document, photo_data_url
from services.errors import DocumentError
from services.profile_service import ProfileStore


logger = logging.getLogger(__name__)

COMMUNICATION_STYLES = [
    "Gentle and nurturing",
    "Direct and practical",
    "Curious questions",
    "Humour welcome",
    "Short replies",
    "Validation first",
]
AGE_RANGES = ["", "Under 18", "18-24", "25-34", "35-44", "45-54", "55-64", "65+"]


def parse_significant_people(raw: str) -> list[SignificantPerson]:
    """Parse ``Name - relationship`` lines into people, skipping blanks."""

    people: list[SignificantPerson] = []
    for line in (raw or "").splitlines():
        name, _, relationship = line.partition(" - ")
        name = name.strip()
        if name:
            people.append(SignificantPerson(name=name, relationship=relationship.strip()))
    return people


def format_significant_people(people: tuple[SignificantPerson, ...]) -> str:
    return "\n".join(
        f"{person.name} - {person.relationship}" if person.relationship else person.name for person in people
    )


def _render_documents(profile_store: ProfileStore) -> None:
    st.markdown("#### Clinical documents")
    uploaded = st.file_uploader(
        "Add a document",
        type=["pdf", "txt", "doc", "docx"],
        key="profile_document_upload",
    )
    if uploaded is not None and st.button("Attach document", key="attach_document"):
        try:
            document = ingest_document(uploaded.name, uploaded.getvalue(), uploaded.type)
        except DocumentError as exc:
            st.warning(str(exc))
        else:
            profile_store.add_document(document)
            st.toast(f"Added {document.name}")

    for document in profile_store.documents:
        col_name, col_remove = st.columns([4, 1])
        col_name.caption(f"{document.name} ({format_file_size(document.size)})")
        if col_remove.button("Remove", key=f"remove_document_{document.id}"):
            profile_store.remove_document(document.id)
            st.rerun()


def render_tab(profile_store: ProfileStore) -> None:
    """Render the profile form and persist it on save."""

    current = profile_store.profile or Profile()
    st.markdown(f"### {profile_store.greeting()}")
    st.caption("Everything here is optional. It helps Talbot understand you and stays on this device.")

    with st.form("profile_form"):
        col_left, col_right = st.columns(2)
        with col_left:
            preferred_name = st.text_input("Preferred name", value=current.preferred_name)
            pronouns = st.text_input("Pronouns", value=current.pronouns)
            age_range = st.selectbox(
                "Age range",
                AGE_RANGES,
                index=AGE_RANGES.index(current.age_range) if current.age_range in AGE_RANGES else 0,
            )
            diagnoses = st.text_area("Mental health conditions", value=current.diagnoses)
            medications = st.text_area("Current medications", value=current.medications)
            treatment_history = st.text_area("Treatment background", value=current.treatment_history)
            therapist_info = st.text_area("Therapist information", value=current.therapist_info)
        with col_right:
            communication_style = st.multiselect(
                "How would you like Talbot to talk with you?",
                COMMUNICATION_STYLES,
                default=[style for style in current.communication_style if style in COMMUNICATION_STYLES],
            )
            custom_communication = st.text_input("Anything else about how to talk with you", value=current.custom_communication)
            triggers = st.text_area("Topics to approach carefully", value=current.triggers)
            therapy_goals = st.text_area("Therapy goals", value=current.therapy_goals)
            coping_strategies = st.text_area("What helps you cope", value=current.coping_strategies)
            current_stressors = st.text_area("Current stressors", value=current.current_stressors)
            people_raw = st.text_area(
                "Important people (one per line, 'Name - relationship')",
                value=format_significant_people(current.significant_people),
            )
        photo = st.file_uploader("Profile photo", type=["png", "jpg", "jpeg", "gif", "webp"])
        submitted = st.form_submit_button("Save profile")

    if submitted:
        payload: dict[str, Any] = {
            "preferredName": preferred_name,
            "pronouns": pronouns,
            "ageRange": age_range,
            "diagnoses": diagnoses,
            "medications": medications,
            "treatmentHistory": treatment_history,
            "communicationStyle": communication_style,
            "customCommunication": custom_communication,
            "triggers": triggers,
            "therapyGoals": therapy_goals,
            "copingStrategies": coping_strategies,
            "currentStressors": current_stressors,
            "therapistInfo": therapist_info,
            "significantPeople": [person.asdict() for person in parse_significant_people(people_raw)],
            "profilePhoto": current.profile_photo,
        }
        if photo is not None:
            try:
                payload["profilePhoto"] = photo_data_url(photo.getvalue(), photo.type)
            except DocumentError as exc:
                st.warning(str(exc))
        if profile_store.save(Profile.from_dict(payload)):
            st.success("Profile saved.")
        else:
            st.warning("Profile saved for this session only; it could not be written to disk.")

    if current.profile_photo:
        _, _, encoded = current.profile_photo.partition(",")
        try:
            st.image(base64.b64decode(encoded), width=96)
        except ValueError:
            logger.warning("Stored profile photo could not be decoded")

    _render_documents(profile_store)

    st.divider()
    if st.button("Clear profile", key="clear_profile", disabled=not profile_store.has_profile()):
        profile_store.clear()
        st.toast("Profile cleared")
        st.rerun()
