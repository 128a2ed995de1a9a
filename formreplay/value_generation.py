"""Produce plausible values for the fields of a discovered form."""

from __future__ import annotations

import random
from datetime import datetime
from typing import Callable, Dict, Optional, Sequence, Tuple

from .form_models import FieldDescriptor, FieldType

FIRST_NAMES = [
    "Aarav", "Advait", "Arjun", "Vihaan", "Reyansh",
    "Aanya", "Diya", "Saanvi", "Myra", "Ananya",
    "Rohan", "Kabir", "Aditya", "Vivaan", "Dhruv",
]
LAST_NAMES = [
    "Patel", "Sharma", "Kumar", "Singh", "Verma",
    "Gupta", "Shah", "Mehta", "Desai", "Joshi",
    "Malhotra", "Kapoor", "Reddy", "Nair", "Rao",
]
EMAIL_DOMAINS = ["gmail.com", "yahoo.com", "outlook.com", "hotmail.com"]
QUERIES = [
    "I would like to inquire about your services and pricing.",
    "Please provide more information about your products.",
    "I am interested in collaborating with your company.",
    "Could you share details about your business solutions?",
    "Requesting a detailed quote for your services.",
    "Would like to discuss a potential business opportunity.",
]

DEFAULT_PASSWORD = "Password123!"
DEFAULT_URL = "https://example.com"
DEFAULT_COLOR = "#ff0000"
DEFAULT_TIME = "12:00"
DEFAULT_SEARCH = "search query"
DEFAULT_RANGE = (0, 100)

SKIPPED_NAME_TOKENS = ("captcha",)
PLACEHOLDER_TOKENS = ("select", "choose", "please", "--")


def _is_placeholder_option(option: str) -> bool:
    lowered = option.strip().lower()
    if lowered in {"", "-", "--"}:
        return True
    return any(lowered.startswith(token) for token in PLACEHOLDER_TOKENS)


def first_real_option(options: Sequence[str]) -> str:
    valid = [option for option in options if not _is_placeholder_option(option)]
    if valid:
        return valid[0]
    return options[0] if options else ""


def should_generate(descriptor: FieldDescriptor) -> bool:
    if descriptor.type is FieldType.FILE:
        return False
    lowered = descriptor.name.lower()
    return not any(token in lowered for token in SKIPPED_NAME_TOKENS)


class ValueGenerator:
    """Keyword heuristics first, then a default per field type.

    A single person name is drawn per generator so name and email fields
    within one form stay consistent.
    """

    def __init__(
        self, seed: Optional[int] = None, today: Optional[Callable[[], datetime]] = None
    ) -> None:
        self._random = random.Random(seed)
        self._now = today or datetime.now
        self._person: Optional[str] = None

    @property
    def person(self) -> str:
        if self._person is None:
            self._person = (
                f"{self._random.choice(FIRST_NAMES)} {self._random.choice(LAST_NAMES)}"
            )
        return self._person

    def email(self) -> str:
        local = ".".join(self.person.lower().split())
        return f"{local}@{self._random.choice(EMAIL_DOMAINS)}"

    def phone(self) -> str:
        prefix = self._random.choice("6789")
        return f"+91{prefix}{self._random.randint(100000000, 999999999)}"

    def query(self) -> str:
        return self._random.choice(QUERIES)

    def value_for(self, descriptor: FieldDescriptor) -> str:
        lowered = descriptor.name.lower()
        kind = descriptor.type
        if kind in (FieldType.SELECT, FieldType.RADIO):
            return first_real_option(descriptor.options)
        if kind is FieldType.CHECKBOX:
            return "true"
        if "email" in lowered or kind is FieldType.EMAIL:
            return self.email()
        if "phone" in lowered or "mobile" in lowered or kind is FieldType.TEL:
            return self.phone()
        if "message" in lowered or "query" in lowered or kind is FieldType.TEXTAREA:
            return self.query()
        if "name" in lowered:
            return self.person
        return self._type_default(descriptor)

    def _type_default(self, descriptor: FieldDescriptor) -> str:
        kind = descriptor.type
        now = self._now()
        validation = descriptor.validation
        if kind is FieldType.NUMBER:
            low, high = _bounds(descriptor, DEFAULT_RANGE)
            return str(self._random.randint(low, high))
        if kind is FieldType.RANGE:
            low, high = _bounds(descriptor, DEFAULT_RANGE)
            return str((low + high) // 2)
        if kind is FieldType.DATE:
            return now.date().isoformat()
        if kind is FieldType.DATETIME_LOCAL:
            return now.strftime("%Y-%m-%dT%H:%M")
        if kind is FieldType.TIME:
            return DEFAULT_TIME
        if kind is FieldType.WEEK:
            year, week, _ = now.date().isocalendar()
            return f"{year}-W{week:02d}"
        if kind is FieldType.MONTH:
            return now.strftime("%Y-%m")
        if kind is FieldType.COLOR:
            return DEFAULT_COLOR
        if kind is FieldType.URL:
            return DEFAULT_URL
        if kind is FieldType.PASSWORD:
            return DEFAULT_PASSWORD
        if kind is FieldType.SEARCH:
            return DEFAULT_SEARCH
        value = self.person
        if validation and validation.max_length is not None:
            value = value[: validation.max_length]
        return value

    def generate_values(self, fields: Sequence[FieldDescriptor]) -> Dict[str, str]:
        values: Dict[str, str] = {}
        for descriptor in fields:
            if should_generate(descriptor):
                values[descriptor.name] = self.value_for(descriptor)
        return values


def _bounds(
    descriptor: FieldDescriptor, default: Tuple[int, int]
) -> Tuple[int, int]:
    low, high = default
    validation = descriptor.validation
    if validation is not None:
        if validation.min is not None:
            low = int(validation.min)
        if validation.max is not None:
            high = int(validation.max)
    if high < low:
        high = low
    return low, high


def generate_values(
    fields: Sequence[FieldDescriptor], seed: Optional[int] = None
) -> Dict[str, str]:
    return ValueGenerator(seed).generate_values(fields)


__all__ = [
    "ValueGenerator",
    "first_real_option",
    "generate_values",
    "should_generate",
]
