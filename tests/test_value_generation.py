from datetime import datetime

from hypothesis import given
from hypothesis import strategies as st

from formreplay.form_models import FieldDescriptor, FieldType, FieldValidation
from formreplay.value_generation import QUERIES, ValueGenerator, first_real_option

FIXED_NOW = datetime(2024, 2, 29, 9, 15)


def _field(name, field_type=FieldType.TEXT, **kwargs):
    return FieldDescriptor(name=name, label=name, type=field_type, **kwargs)


def _generator(seed=7):
    return ValueGenerator(seed, today=lambda: FIXED_NOW)


def test_same_seed_gives_same_values():
    fields = [_field("name"), _field("email"), _field("phone"), _field("message")]

    assert _generator().generate_values(fields) == _generator().generate_values(fields)


def test_name_and_email_share_one_person():
    generator = _generator()
    values = generator.generate_values([_field("full_name"), _field("email")])

    first, last = values["full_name"].lower().split()
    assert values["email"].startswith(f"{first}.{last}@")


def test_keyword_heuristics():
    generator = _generator()

    assert generator.value_for(_field("mobile")).startswith("+91")
    assert generator.value_for(_field("your_query")) in QUERIES
    assert generator.value_for(_field("notes", FieldType.TEXTAREA)) in QUERIES


def test_file_and_captcha_fields_are_left_out():
    values = _generator().generate_values(
        [_field("resume", FieldType.FILE), _field("g-captcha"), _field("city")]
    )

    assert list(values) == ["city"]


def test_type_defaults():
    generator = _generator()

    assert generator.value_for(_field("d", FieldType.DATE)) == "2024-02-29"
    assert generator.value_for(_field("dt", FieldType.DATETIME_LOCAL)) == "2024-02-29T09:15"
    assert generator.value_for(_field("t", FieldType.TIME)) == "12:00"
    assert generator.value_for(_field("w", FieldType.WEEK)) == "2024-W09"
    assert generator.value_for(_field("m", FieldType.MONTH)) == "2024-02"
    assert generator.value_for(_field("c", FieldType.COLOR)) == "#ff0000"
    assert generator.value_for(_field("u", FieldType.URL)) == "https://example.com"
    assert generator.value_for(_field("p", FieldType.PASSWORD)) == "Password123!"
    assert generator.value_for(_field("s", FieldType.SEARCH)) == "search query"
    assert generator.value_for(_field("ok", FieldType.CHECKBOX)) == "true"


def test_range_uses_midpoint():
    field = _field("r", FieldType.RANGE, validation=FieldValidation(min=10, max=20))

    assert _generator().value_for(field) == "15"


def test_select_skips_placeholder_option():
    field = _field("topic", FieldType.SELECT, options=["Choose one", "Sales", "Support"])

    assert _generator().value_for(field) == "Sales"
    assert first_real_option(["-- select --"]) == "-- select --"
    assert first_real_option([]) == ""


def test_text_default_respects_max_length():
    field = _field("x", validation=FieldValidation(max_length=4))

    assert len(_generator().value_for(field)) <= 4


@given(st.integers(min_value=-50, max_value=50), st.integers(min_value=0, max_value=50))
def test_numbers_stay_within_bounds(low, span):
    field = _field("n", FieldType.NUMBER, validation=FieldValidation(min=low, max=low + span))

    value = int(ValueGenerator(0).value_for(field))

    assert low <= value <= low + span
