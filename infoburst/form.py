from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING
from urllib.parse import urlparse

import structlog

from .models import MAX_TEXT_LENGTH, Fact, StoreError

if TYPE_CHECKING:
    from .shell import AppShell

logger = structlog.get_logger()

INVALID_URL_MESSAGE = "Please enter a valid URL starting with http..."


def is_valid_http_url(value: str) -> bool:
    try:
        url = urlparse(value or "")
        url.port  # raises on a non-numeric or out-of-range port
    except ValueError:
        return False
    if not url.hostname or any(ch.isspace() for ch in url.netloc):
        return False
    return url.scheme in ("http", "https")


@dataclass
class NewFactForm:
    text: str = ""
    source: str = ""
    category: str = ""
    is_uploading: bool = False
    is_valid_url: bool = True

    @property
    def remaining(self) -> int:
        return MAX_TEXT_LENGTH - len(self.text)

    def set_text(self, value: str) -> None:
        self.text = value

    def set_source(self, value: str) -> None:
        # editing the source clears the inline URL error
        self.source = value
        self.is_valid_url = True

    def set_category(self, value: str) -> None:
        self.category = value

    def is_valid(self) -> bool:
        return bool(self.text) and is_valid_http_url(self.source) and bool(self.category) and len(self.text) <= MAX_TEXT_LENGTH

    def reset(self) -> None:
        self.text = ""
        self.source = ""
        self.category = ""
        self.is_valid_url = True

    async def submit(self, shell: "AppShell") -> Fact | None:
        """Validate and insert the fact; returns it, or None when nothing was added.

        Only a bad source URL is reported (``is_valid_url``). Empty or
        over-long text and a missing category are ignored silently.
        """
        if self.is_uploading:
            return None

        if not self.is_valid():
            if not is_valid_http_url(self.source):
                self.is_valid_url = False
            return None

        self.is_uploading = True
        try:
            fact = await shell.store.insert_fact(self.text, self.source, self.category)
        except StoreError as exc:
            logger.warning("form.submit_failed", category=self.category, error=str(exc))
            return None
        finally:
            self.is_uploading = False

        shell.prepend_fact(fact)
        self.reset()
        shell.show_form = False
        logger.info("form.submitted", fact_id=str(fact.id), category=fact.category)
        return fact
