from __future__ import annotations

from models import SignificantPerson
from tabs.profile import format_significant_people, parse_significant_people


def test_parse_significant_people_keeps_hyphenated_names() -> None:
    people = parse_significant_people("Mary-Jane - sister\n\n  Tom  \nDr Lee - therapist")

    assert people == [
        SignificantPerson(name="Mary-Jane", relationship="sister"),
        SignificantPerson(name="Tom", relationship=""),
        SignificantPerson(name="Dr Lee", relationship="therapist"),
    ]


def test_format_significant_people() -> None:
    people = (SignificantPerson(name="Sam", relationship="partner"), SignificantPerson(name="Jo", relationship=""))

    assert format_significant_people(people) == "Sam - partner\nJo"
