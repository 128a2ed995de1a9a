"""Exception hierarchy for discovery, filling, and storage."""

from __future__ import annotations


class FormReplayError(Exception):
    """Base class for every error raised by the package."""


class DiscoveryError(FormReplayError):
    """Discovery could not produce a form descriptor."""


class NoFormFound(DiscoveryError):
    def __init__(self, message: str = "No form found on the page") -> None:
        super().__init__(message)


class PageUnreachable(DiscoveryError):
    pass


class FillError(FormReplayError):
    """Replaying a stored form against the live page failed."""


class NavigationFailed(FillError):
    pass


class FieldResolutionFailed(FillError):
    def __init__(self, field_name: str) -> None:
        super().__init__(f"Field not found: {field_name}")
        self.field_name = field_name


class SubmitClickFailed(FillError):
    pass


class StoreError(FormReplayError):
    pass


class FormNotFound(StoreError):
    def __init__(self, form_id: str) -> None:
        super().__init__(f"Form not found: {form_id}")
        self.form_id = form_id


__all__ = [
    "FormReplayError",
    "DiscoveryError",
    "NoFormFound",
    "PageUnreachable",
    "FillError",
    "NavigationFailed",
    "FieldResolutionFailed",
    "SubmitClickFailed",
    "StoreError",
    "FormNotFound",
]
