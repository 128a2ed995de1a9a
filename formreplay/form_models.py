"""Records describing discovered forms and replayed submissions."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class FieldType(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    EMAIL = "email"
    PASSWORD = "password"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    SELECT = "select"
    TEXTAREA = "textarea"
    TEL = "tel"
    URL = "url"
    DATE = "date"
    DATETIME_LOCAL = "datetime-local"
    TIME = "time"
    WEEK = "week"
    MONTH = "month"
    COLOR = "color"
    FILE = "file"
    HIDDEN = "hidden"
    IMAGE = "image"
    RANGE = "range"
    RESET = "reset"
    SEARCH = "search"
    SUBMIT = "submit"
    BUTTON = "button"

    @classmethod
    def from_native(cls, raw: Optional[str]) -> "FieldType":
        """Mirror the DOM: unknown or missing input types behave as text."""
        try:
            return cls((raw or "").strip().lower())
        except ValueError:
            return cls.TEXT


STRUCTURAL_TYPES = {FieldType.SUBMIT, FieldType.RESET, FieldType.IMAGE, FieldType.BUTTON}


class SubmissionStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


Number = Union[int, float]


@dataclass(slots=True)
class FieldValidation:
    required: Optional[bool] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    min: Optional[Number] = None
    max: Optional[Number] = None
    pattern: Optional[str] = None

    def is_empty(self) -> bool:
        return all(
            value is None
            for value in (
                self.required,
                self.min_length,
                self.max_length,
                self.min,
                self.max,
                self.pattern,
            )
        )

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            "required": self.required,
            "minLength": self.min_length,
            "maxLength": self.max_length,
            "min": self.min,
            "max": self.max,
            "pattern": self.pattern,
        }
        return {key: value for key, value in payload.items() if value is not None}

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "FieldValidation":
        return cls(
            required=payload.get("required"),
            min_length=payload.get("minLength"),
            max_length=payload.get("maxLength"),
            min=payload.get("min"),
            max=payload.get("max"),
            pattern=payload.get("pattern"),
        )


@dataclass(slots=True)
class FieldDescriptor:
    name: str
    label: str
    type: FieldType
    required: bool = False
    options: List[str] = field(default_factory=list)
    validation: Optional[FieldValidation] = None
    selector: str = ""
    xpath: str = ""
    placeholder: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "name": self.name,
            "label": self.label,
            "type": self.type.value,
            "required": self.required,
            "selector": self.selector,
            "xpath": self.xpath,
        }
        if self.options:
            payload["options"] = list(self.options)
        if self.validation and not self.validation.is_empty():
            payload["validation"] = self.validation.to_dict()
        if self.placeholder:
            payload["placeholder"] = self.placeholder
        return payload

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "FieldDescriptor":
        validation = payload.get("validation")
        return cls(
            name=payload["name"],
            label=payload.get("label") or "",
            type=FieldType.from_native(payload.get("type")),
            required=bool(payload.get("required", False)),
            options=list(payload.get("options") or []),
            validation=FieldValidation.from_dict(validation) if validation else None,
            selector=payload.get("selector") or "",
            xpath=payload.get("xpath") or "",
            placeholder=payload.get("placeholder"),
        )


@dataclass(slots=True)
class SubmitControl:
    selector: str = ""
    xpath: str = ""
    text: Optional[str] = None

    @property
    def found(self) -> bool:
        return bool(self.selector or self.xpath)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"selector": self.selector, "xpath": self.xpath}
        if self.text:
            payload["text"] = self.text
        return payload

    @classmethod
    def from_dict(cls, payload: Optional[Dict[str, Any]]) -> "SubmitControl":
        payload = payload or {}
        return cls(
            selector=payload.get("selector") or "",
            xpath=payload.get("xpath") or "",
            text=payload.get("text"),
        )


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_timestamp(raw: Optional[str]) -> datetime:
    if not raw:
        return utcnow()
    parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(slots=True)
class FormDescriptor:
    url: str
    name: str
    fields: List[FieldDescriptor]
    submit: SubmitControl = field(default_factory=SubmitControl)
    description: Optional[str] = None
    created: datetime = field(default_factory=utcnow)
    updated: datetime = field(default_factory=utcnow)
    id: Optional[str] = None

    def touch(self) -> None:
        self.updated = utcnow()

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "url": self.url,
            "name": self.name,
            "fields": [descriptor.to_dict() for descriptor in self.fields],
            "submitButton": self.submit.to_dict(),
            "created": self.created.isoformat(),
            "updated": self.updated.isoformat(),
        }
        if self.id:
            payload["_id"] = self.id
        if self.description:
            payload["description"] = self.description
        return payload

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "FormDescriptor":
        return cls(
            id=payload.get("_id"),
            url=payload["url"],
            name=payload.get("name") or "",
            description=payload.get("description"),
            fields=[FieldDescriptor.from_dict(item) for item in payload.get("fields", [])],
            submit=SubmitControl.from_dict(payload.get("submitButton")),
            created=_parse_timestamp(payload.get("created")),
            updated=_parse_timestamp(payload.get("updated")),
        )


@dataclass(slots=True)
class SubmissionRecord:
    form_id: str
    values: Dict[str, Any]
    status: SubmissionStatus
    error: Optional[str] = None
    timestamp: datetime = field(default_factory=utcnow)
    id: Optional[str] = None

    def __post_init__(self) -> None:
        if self.status is SubmissionStatus.ERROR and not self.error:
            raise ValueError("error submissions must carry a message")
        if self.status is SubmissionStatus.SUCCESS and self.error:
            raise ValueError("successful submissions cannot carry an error")

    @classmethod
    def success(cls, form_id: str, values: Dict[str, Any]) -> "SubmissionRecord":
        return cls(form_id=form_id, values=dict(values), status=SubmissionStatus.SUCCESS)

    @classmethod
    def failure(
        cls, form_id: str, values: Dict[str, Any], error: str
    ) -> "SubmissionRecord":
        return cls(
            form_id=form_id,
            values=dict(values),
            status=SubmissionStatus.ERROR,
            error=error or "Form submission failed",
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "formId": self.form_id,
            "values": dict(self.values),
            "status": self.status.value,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.id:
            payload["_id"] = self.id
        if self.error:
            payload["error"] = self.error
        return payload

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "SubmissionRecord":
        return cls(
            id=payload.get("_id"),
            form_id=payload["formId"],
            values=dict(payload.get("values") or {}),
            status=SubmissionStatus(payload["status"]),
            error=payload.get("error"),
            timestamp=_parse_timestamp(payload.get("timestamp")),
        )


__all__ = [
    "FieldType",
    "STRUCTURAL_TYPES",
    "SubmissionStatus",
    "FieldValidation",
    "FieldDescriptor",
    "SubmitControl",
    "FormDescriptor",
    "SubmissionRecord",
    "utcnow",
]
