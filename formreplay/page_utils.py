from __future__ import annotations

import logging
from typing import Optional, Type
from urllib.parse import urlparse

import tldextract
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Page
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from .errors import FormReplayError

QUIESCENCE_TIMEOUT_MS = 20000

_TLD_EXTRACTOR = tldextract.TLDExtract(suffix_list_urls=())


def open_page(
    page: Page,
    url: str,
    *,
    error_cls: Type[FormReplayError],
    timeout_ms: int = 45000,
    logger: Optional[logging.Logger] = None,
):
    """Navigate and wait for quiescence; navigation failures surface as ``error_cls``."""
    try:
        response = page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
    except PlaywrightError as exc:
        raise error_cls(f"Could not load {url}: {exc}") from exc
    wait_for_quiescence(page, logger=logger)
    return response


def wait_for_quiescence(
    page: Page,
    *,
    timeout_ms: int = QUIESCENCE_TIMEOUT_MS,
    logger: Optional[logging.Logger] = None,
) -> bool:
    try:
        page.wait_for_load_state("networkidle", timeout=timeout_ms)
        return True
    except PlaywrightTimeoutError:
        if logger:
            logger.debug("network idle wait timed out after %sms", timeout_ms)
        return False


def registrable_domain(url: str) -> str:
    host = (urlparse(url).hostname or "").lower()
    if host.startswith("www."):
        host = host[4:]
    if not host:
        return ""
    extracted = _TLD_EXTRACTOR(host)
    if extracted.domain and extracted.suffix:
        return f"{extracted.domain}.{extracted.suffix}".lower()
    return host
