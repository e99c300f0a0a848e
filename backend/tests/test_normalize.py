import pytest

from app.errors import ValidationError
from app.services.normalize import clean_text, name_matches, normalize_student_data


def test_fields_are_trimmed():
    assert normalize_student_data({"name": " Asha ", "usn": "U001\n", "sem": " 3"}) == {
        "name": "Asha", "usn": "U001", "sem": "3"
    }


@pytest.mark.parametrize("data,expected", [
    ({"sem": "3", "class": "5"}, "3"),
    ({"class": "5"}, "5"),
    ({"semester": "4", "class": "5"}, "4"),
    ({"sem": "", "class": "5"}, "5"),
])
def test_semester_aliases(data, expected):
    fields = normalize_student_data({"name": "Asha", "usn": "U001", **data})
    assert fields["sem"] == expected
    assert set(fields) == {"name", "usn", "sem"}


@pytest.mark.parametrize("data", [
    {},
    {"name": "Asha", "usn": "U001"},
    {"name": None, "usn": "U001", "sem": "3"},
    {"name": "Asha", "usn": "  ", "sem": "3"},
])
def test_missing_fields_raise(data):
    with pytest.raises(ValidationError):
        normalize_student_data(data)


def test_clean_text_converts_numbers():
    assert clean_text(3) == "3"
    assert clean_text(None) == ""


def test_name_matches_ignores_case():
    assert name_matches("Sanjay", "AN")
    assert not name_matches("Bob", "an")


def test_usn_length_is_limited():
    with pytest.raises(ValidationError):
        normalize_student_data({"name": "Asha", "usn": "U" * 65, "sem": "3"})
    assert normalize_student_data({"name": "Asha", "usn": " " + "U" * 64 + " ", "sem": "3"})["usn"] == "U" * 64
