"""Replay a stored form descriptor against the live page."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from playwright.sync_api import ElementHandle, Page
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from .browser import BrowserConfig, open_session
from .dom import snapshot_page
from .errors import FieldResolutionFailed, NavigationFailed, SubmitClickFailed
from .form_models import FieldDescriptor, FieldType, FormDescriptor
from .locators import quote_attribute
from .page_utils import open_page
from .submit_detection import find_submit_element

SUBMIT_NOT_FOUND = "Submit button not found"
SKIPPED_FIELD_TYPES = {FieldType.FILE}
SKIPPED_NAME_TOKENS = ("captcha",)
TRUTHY_VALUES = {"true", "1", "yes", "on", "checked"}
SENSITIVE_TYPES = {FieldType.PASSWORD}
OPTION_MATCH_TIMEOUT_MS = 2000

FIELD_HIGHLIGHT = {"border": "2px solid blue", "shadow": "0 0 5px rgba(0, 0, 255, 0.5)"}
SUBMIT_HIGHLIGHT = {"border": "2px solid green", "shadow": "0 0 5px rgba(0, 255, 0, 0.5)"}
NO_HIGHLIGHT = {"border": "", "shadow": ""}

HIGHLIGHT_SCRIPT = """
(el, style) => {
  el.style.border = style.border;
  el.style.boxShadow = style.shadow;
}
"""

CONTROL_KIND_SCRIPT = """
(el) => {
  const tag = el.tagName.toLowerCase();
  if (tag !== 'input') return tag;
  const type = (el.type || '').toLowerCase();
  return type === 'checkbox' || type === 'radio' ? type : 'input';
}
"""

SUCCESS_OVERLAY_SCRIPT = """
() => {
  const dialog = document.createElement('div');
  dialog.setAttribute('data-formreplay', 'submitted');
  dialog.style.cssText = [
    'position: fixed', 'top: 50%', 'left: 50%', 'transform: translate(-50%, -50%)',
    'background: #4CAF50', 'color: white', 'padding: 20px', 'border-radius: 8px',
    'box-shadow: 0 4px 6px rgba(0, 0, 0, 0.1)', 'z-index: 10000',
    'font-family: Arial, sans-serif', 'font-size: 16px', 'text-align: center',
  ].join('; ');
  dialog.textContent = 'Form Submitted Successfully!';
  document.body.appendChild(dialog);
}
"""

LOGGER = logging.getLogger(__name__)


class FillState(str, Enum):
    PENDING = "pending"
    NAVIGATING = "navigating"
    FILLING_FIELDS = "filling_fields"
    LOCATING_SUBMIT = "locating_submit"
    SUBMITTING = "submitting"
    AWAITING_SETTLE = "awaiting_settle"
    DONE = "done"
    FAILED = "failed"


@dataclass(slots=True)
class FillOptions:
    # Inter-keystroke delay basis in milliseconds: larger is slower.
    speed: float = 500
    visible: bool = True
    settle_ms: Optional[float] = None
    post_submit_hold_ms: float = 3000
    submit_wait_ms: float = 10000

    @property
    def navigation_settle_ms(self) -> float:
        return self.speed if self.settle_ms is None else self.settle_ms

    @property
    def pause_ms(self) -> float:
        return self.speed / 2

    @property
    def keystroke_delay_ms(self) -> float:
        return self.speed / 10


@dataclass(slots=True)
class FillResult:
    success: bool
    submitted: bool
    filled_fields: List[str] = field(default_factory=list)
    skipped_fields: Dict[str, str] = field(default_factory=dict)
    submit_error: Optional[str] = None
    final_url: str = ""

    def to_dict(self) -> Dict[str, object]:
        return {
            "success": self.success,
            "submitted": self.submitted,
            "filled_fields": list(self.filled_fields),
            "skipped_fields": dict(self.skipped_fields),
            "submit_error": self.submit_error,
            "final_url": self.final_url,
        }


LocatorBuilder = Callable[[FieldDescriptor], Optional[str]]

LOCATOR_STRATEGIES: Tuple[Tuple[str, LocatorBuilder], ...] = (
    ("stored selector", lambda f: f.selector),
    ("name attribute", lambda f: f"[name={quote_attribute(f.name)}]"),
    ("id attribute", lambda f: f"[id={quote_attribute(f.name)}]"),
    ("stored xpath", lambda f: f"xpath={f.xpath}" if f.xpath else None),
    ("input name", lambda f: f"input[name={quote_attribute(f.name)}]"),
    ("textarea name", lambda f: f"textarea[name={quote_attribute(f.name)}]"),
    ("select name", lambda f: f"select[name={quote_attribute(f.name)}]"),
    ("placeholder", lambda f: f"[placeholder*={quote_attribute(f.name)}]"),
    ("aria-label", lambda f: f"[aria-label*={quote_attribute(f.name)}]"),
)


def locator_candidates(descriptor: FieldDescriptor) -> List[Tuple[str, str]]:
    candidates: List[Tuple[str, str]] = []
    seen = set()
    for strategy, build in LOCATOR_STRATEGIES:
        locator = build(descriptor)
        if not locator or locator in seen:
            continue
        seen.add(locator)
        candidates.append((strategy, locator))
    return candidates


def skip_reason(descriptor: FieldDescriptor, values: Mapping[str, Any]) -> Optional[str]:
    if descriptor.type in SKIPPED_FIELD_TYPES:
        return "file_field"
    lowered = descriptor.name.lower()
    if any(token in lowered for token in SKIPPED_NAME_TOKENS):
        return "captcha_field"
    if values.get(descriptor.name) is None:
        return "no_value"
    return None


def _mask_value(descriptor: FieldDescriptor, value: str) -> str:
    if descriptor.type in SENSITIVE_TYPES:
        return "***"
    if len(value) > 18:
        return f"{value[:8]}…"
    return value


class FormFiller:
    """Drives one page through navigation, field input, and submission."""

    def __init__(
        self,
        page: Page,
        options: Optional[FillOptions] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.page = page
        self.options = options or FillOptions()
        self.logger = logger or LOGGER
        self.state = FillState.PENDING

    def fill(self, form: FormDescriptor, values: Mapping[str, Any]) -> FillResult:
        try:
            return self._run(form, values)
        except Exception:
            self._transition(FillState.FAILED)
            raise

    def _run(self, form: FormDescriptor, values: Mapping[str, Any]) -> FillResult:
        self._transition(FillState.NAVIGATING)
        self.logger.info("Navigating to form URL %s", form.url)
        open_page(self.page, form.url, error_cls=NavigationFailed, logger=self.logger)
        self.page.wait_for_timeout(self.options.navigation_settle_ms)

        self._transition(FillState.FILLING_FIELDS)
        result = FillResult(success=True, submitted=False)
        for descriptor in form.fields:
            self._fill_field(descriptor, values, result)

        self._transition(FillState.LOCATING_SUBMIT)
        submit_handle = self._find_submit_handle()
        if submit_handle is None:
            self.logger.warning(SUBMIT_NOT_FOUND)
            result.submit_error = SUBMIT_NOT_FOUND
            result.final_url = self.page.url
            self._transition(FillState.DONE)
            return result

        self._transition(FillState.SUBMITTING)
        navigated = self._click_submit(submit_handle)
        result.submitted = True

        self._transition(FillState.AWAITING_SETTLE)
        self._await_settle(navigated)
        result.final_url = self.page.url
        self._transition(FillState.DONE)
        self.logger.info(
            "Submitted form with %d filled and %d skipped fields",
            len(result.filled_fields),
            len(result.skipped_fields),
        )
        return result

    def _transition(self, state: FillState) -> None:
        self.logger.debug("Fill state %s -> %s", self.state.value, state.value)
        self.state = state

    def _pause(self, duration_ms: Optional[float] = None) -> None:
        self.page.wait_for_timeout(
            self.options.pause_ms if duration_ms is None else duration_ms
        )

    def _fill_field(
        self,
        descriptor: FieldDescriptor,
        values: Mapping[str, Any],
        result: FillResult,
    ) -> None:
        reason = skip_reason(descriptor, values)
        if reason:
            self.logger.debug("Skipping field %s (%s)", descriptor.name, reason)
            result.skipped_fields[descriptor.name] = reason
            return
        value = str(values[descriptor.name])
        try:
            handle = self.resolve_field(descriptor)
            self._enter_value(descriptor, handle, value)
        except FieldResolutionFailed as exc:
            self.logger.warning("%s; skipping", exc)
            result.skipped_fields[descriptor.name] = "not_found"
        except Exception as exc:  # noqa: BLE001
            self.logger.warning("Failed to fill %s: %s", descriptor.name, exc)
            result.skipped_fields[descriptor.name] = "error"
        else:
            self.logger.debug(
                "Filled %s with %s", descriptor.name, _mask_value(descriptor, value)
            )
            result.filled_fields.append(descriptor.name)

    def resolve_field(self, descriptor: FieldDescriptor) -> ElementHandle:
        for strategy, locator in locator_candidates(descriptor):
            try:
                handle = self.page.query_selector(locator)
            except PlaywrightError as exc:
                self.logger.debug("Locator %s rejected: %s", locator, exc)
                continue
            if handle:
                self.logger.debug(
                    "Found field %s via %s (%s)", descriptor.name, strategy, locator
                )
                return handle
        raise FieldResolutionFailed(descriptor.name)

    def _enter_value(
        self, descriptor: FieldDescriptor, handle: ElementHandle, value: str
    ) -> None:
        handle.scroll_into_view_if_needed()
        self._pause()
        self._highlight(handle, FIELD_HIGHLIGHT)

        kind = handle.evaluate(CONTROL_KIND_SCRIPT)
        if kind == "select":
            self._choose_option(handle, value)
        elif kind == "checkbox":
            if value.strip().lower() in TRUTHY_VALUES:
                handle.check()
            else:
                handle.uncheck()
        elif kind == "radio":
            self._check_radio(descriptor, handle, value)
        else:
            handle.click(click_count=3)
            handle.press("Backspace")
            self._pause()
            handle.type(value, delay=self.options.keystroke_delay_ms)

        self._highlight(handle, NO_HIGHLIGHT)
        self._pause()

    def _choose_option(self, handle: ElementHandle, value: str) -> None:
        try:
            handle.select_option(label=value, timeout=OPTION_MATCH_TIMEOUT_MS)
        except PlaywrightError:
            handle.select_option(value=value, timeout=OPTION_MATCH_TIMEOUT_MS)

    def _check_radio(
        self, descriptor: FieldDescriptor, handle: ElementHandle, value: str
    ) -> None:
        locator = (
            f"input[type=\"radio\"][name={quote_attribute(descriptor.name)}]"
            f"[value={quote_attribute(value)}]"
        )
        try:
            target = self.page.query_selector(locator) or handle
        except PlaywrightError:
            target = handle
        target.check()

    def _highlight(self, handle: ElementHandle, style: Dict[str, str]) -> None:
        try:
            handle.evaluate(HIGHLIGHT_SCRIPT, style)
        except PlaywrightError as exc:
            self.logger.debug("Highlight skipped: %s", exc)

    def _find_submit_handle(self) -> Optional[ElementHandle]:
        try:
            document = snapshot_page(self.page)
        except PlaywrightError as exc:
            self.logger.warning("Could not snapshot page for submit search: %s", exc)
            return None
        match = find_submit_element(document)
        if match is None:
            return None
        control = match.control
        locators = [control.selector, f"xpath={control.xpath}" if control.xpath else ""]
        for locator in locators:
            if not locator:
                continue
            try:
                handle = self.page.query_selector(locator)
            except PlaywrightError as exc:
                self.logger.debug("Submit locator %s rejected: %s", locator, exc)
                continue
            if handle:
                self.logger.info(
                    "Found submit control '%s' with %s", control.text or "", locator
                )
                return handle
        return None

    def _click_submit(self, handle: ElementHandle) -> bool:
        """Click the control; True when a navigation completed within ``submit_wait_ms``."""
        self._highlight(handle, SUBMIT_HIGHLIGHT)
        self._pause(self.options.speed)
        self.logger.info("Clicking submit control")
        try:
            with self.page.expect_navigation(
                wait_until="load", timeout=self.options.submit_wait_ms
            ):
                try:
                    handle.click()
                except PlaywrightError as exc:
                    raise SubmitClickFailed(f"Submit click failed: {exc}") from exc
        except PlaywrightTimeoutError:
            self.logger.debug("Submit did not trigger navigation in time")
            return False
        return True

    def _await_settle(self, navigated: bool) -> None:
        if not navigated:
            try:
                self.page.wait_for_load_state(
                    "networkidle", timeout=self.options.submit_wait_ms
                )
            except PlaywrightTimeoutError as exc:
                self.logger.debug("Post-submit network idle wait timed out: %s", exc)
        try:
            self.page.evaluate(SUCCESS_OVERLAY_SCRIPT)
        except PlaywrightError as exc:
            self.logger.debug("Success overlay skipped: %s", exc)
        self._pause(self.options.post_submit_hold_ms)


def fill_form(
    form: FormDescriptor,
    values: Mapping[str, Any],
    options: Optional[FillOptions] = None,
    *,
    config: Optional[BrowserConfig] = None,
    logger: Optional[logging.Logger] = None,
) -> FillResult:
    options = options or FillOptions()
    browser_config = config or BrowserConfig(headless=not options.visible)
    with open_session(browser_config) as page:
        return FormFiller(page, options, logger).fill(form, values)


__all__ = [
    "SUBMIT_NOT_FOUND",
    "LOCATOR_STRATEGIES",
    "FillState",
    "FillOptions",
    "FillResult",
    "FormFiller",
    "locator_candidates",
    "skip_reason",
    "fill_form",
]
