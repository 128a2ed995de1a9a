from hypothesis import given
from hypothesis import strategies as st

from formreplay.dom import parse_html
from formreplay.field_extraction import (
    UNTITLED_FIELD,
    extract_fields,
    resolve_label,
    slugify_label,
    sniff_field_type,
)
from formreplay.form_models import FieldType
from tests.helpers import parse_fixture


def _by_name(fields):
    return {field.name: field for field in fields}


def test_contact_fixture_fields_in_selector_order(contact_document):
    fields = extract_fields(contact_document)

    assert [field.name for field in fields] == [
        "fullName",
        "email",
        "phone_number",
        "attachment",
        "message",
        "topic",
    ]


def test_hidden_and_outside_controls_are_ignored(contact_document):
    names = {field.name for field in extract_fields(contact_document)}

    assert "csrf" not in names
    assert "honeypot" not in names
    assert "q" not in names


def test_labels_follow_strategy_order(contact_document):
    fields = _by_name(extract_fields(contact_document))

    assert fields["fullName"].label == "Full name"
    assert fields["email"].label == "Email address"
    assert fields["phone_number"].label == "Your phone"
    assert fields["message"].label == "Your message"
    assert fields["topic"].label == "topic"


def test_types_are_native_then_sniffed(contact_document):
    fields = _by_name(extract_fields(contact_document))

    assert fields["fullName"].type is FieldType.TEXT
    assert fields["email"].type is FieldType.EMAIL
    assert fields["phone_number"].type is FieldType.TEL
    assert fields["attachment"].type is FieldType.FILE
    assert fields["message"].type is FieldType.TEXTAREA
    assert fields["topic"].type is FieldType.SELECT


def test_select_options_and_validation_are_captured(contact_document):
    fields = _by_name(extract_fields(contact_document))

    assert fields["topic"].options == ["Choose a topic", "Sales", "Support"]
    validation = fields["fullName"].validation
    assert fields["fullName"].required is True
    assert validation.required is True
    assert validation.min_length == 2
    assert validation.max_length == 40
    assert fields["phone_number"].validation is None


def test_locators_are_recorded(contact_document):
    fields = _by_name(extract_fields(contact_document))

    assert fields["fullName"].selector == "#full-name"
    assert fields["email"].selector == '[name="email"]'
    assert fields["email"].xpath == (
        "/html[1]/body[1]/section[1]/form[@id='contact-form']/div[2]/label[1]/input[1]"
    )


def test_aria_labelledby_joins_referenced_texts():
    document = parse_html(
        "<body><span id='a'>Delivery</span><span id='b'> date </span>"
        "<form><input name='d' aria-labelledby='a b missing'></form></body>"
    )

    (field,) = extract_fields(document)

    assert field.label == "Delivery date"


def test_name_falls_back_to_slugified_label():
    document = parse_html(
        "<body><form><input aria-label='Your Company (optional)'></form></body>"
    )

    (field,) = extract_fields(document)

    assert field.name == "your_company_optional"
    assert field.label == "Your Company (optional)"


def test_unlabelled_control_gets_untitled_label():
    document = parse_html("<body><form><input type='text'></form></body>")

    (field,) = extract_fields(document)

    assert field.label == UNTITLED_FIELD
    assert field.name == "untitled_field"


def test_radio_options_come_from_same_name_group():
    document = parse_html(
        "<body><form>"
        "<input type='radio' name='plan' value='basic'>"
        "<input type='radio' name='plan' value='pro'>"
        "<input type='radio' name='other' value='x'>"
        "</form></body>"
    )

    fields = extract_fields(document)

    assert fields[0].type is FieldType.RADIO
    assert fields[0].options == ["basic", "pro"]


def test_nested_containers_do_not_duplicate_fields():
    document = parse_html(
        "<body><div class='form-outer'><div class='form-inner'>"
        "<input name='a'><input name='b'></div></div></body>"
    )

    assert [field.name for field in extract_fields(document)] == ["a", "b"]


def test_body_is_scanned_when_no_container_exists():
    fields = extract_fields(parse_fixture("loose_inputs.html"))

    assert [field.name for field in fields] == ["city", "guests"]
    assert fields[1].validation.min == 1
    assert fields[1].validation.max == 8


def test_label_resolution_stops_at_form_boundary():
    document = parse_html(
        "<body><div><label>Outside</label>"
        "<form><input name='inside'></form></div></body>"
    )
    element = document.find_first(lambda n: n.tag == "input")

    assert resolve_label(element, document) == "inside"


def test_sniffing_overrides_in_rule_order():
    assert sniff_field_type("email", FieldType.TEXT) is FieldType.EMAIL
    assert sniff_field_type("Mobile", FieldType.TEXT) is FieldType.TEL
    assert sniff_field_type("email_message", FieldType.TEXT) is FieldType.TEXTAREA
    assert sniff_field_type("city", FieldType.NUMBER) is FieldType.NUMBER


def test_sniffing_ignores_name_case():
    document = parse_html("<body><form><input name='Email' type='text'></form></body>")

    (field,) = extract_fields(document)

    assert field.name == "Email"
    assert field.type is FieldType.EMAIL


@given(st.text(max_size=40), st.sampled_from(list(FieldType)))
def test_sniffing_is_idempotent(name, native):
    once = sniff_field_type(name, native)

    assert sniff_field_type(name, once) is once


@given(st.text(max_size=60))
def test_slugs_are_lowercase_and_underscore_separated(label):
    slug = slugify_label(label)

    assert slug == slug.strip("_")
    assert "__" not in slug
    assert all(char.isascii() and (char.isalnum() or char == "_") for char in slug)
    assert slug == slug.lower()
