"""Tests for new-fact validation and submission."""

from unittest.mock import AsyncMock

import pytest

from infoburst.form import NewFactForm, is_valid_http_url
from infoburst.models import StoreError


@pytest.mark.parametrize(
    "value,expected",
    [
        ("https://x.com", True),
        ("http://example.com/path?q=1", True),
        ("HTTPS://X.COM", True),
        ("ftp://x.com", False),
        ("x.com", False),
        ("https://", False),
        ("", False),
        ("javascript:alert(1)", False),
        ("http://[::1", False),
        ("http://a b.com", False),
        ("http://x.com:99999", False),
        ("http://x.com:port", False),
        ("http://x.com:8080/a", True),
        ("http://:80", False),
    ],
)
def test_is_valid_http_url(value, expected):
    assert is_valid_http_url(value) is expected


def _form(text="Honey never spoils", source="https://x.com", category="history"):
    form = NewFactForm()
    form.set_text(text)
    form.set_source(source)
    form.set_category(category)
    return form


@pytest.mark.asyncio
async def test_submit_prepends_and_resets(shell):
    await shell.start()
    shell.show_form = True
    form = _form()

    fact = await form.submit(shell)

    assert fact is not None
    assert shell.facts[0] is fact
    assert len(shell.facts) == 6
    assert (form.text, form.source, form.category) == ("", "", "")
    assert form.is_uploading is False
    assert form.is_valid_url is True
    assert shell.show_form is False


@pytest.mark.asyncio
async def test_text_length_boundary(shell):
    shell.store.insert_fact = AsyncMock(wraps=shell.store.insert_fact)

    too_long = _form(text="x" * 201)
    assert too_long.remaining == -1
    assert await too_long.submit(shell) is None
    shell.store.insert_fact.assert_not_called()
    # silent rejection: no inline error, fields kept
    assert too_long.is_valid_url is True
    assert too_long.text == "x" * 201

    exact = _form(text="x" * 200)
    assert exact.remaining == 0
    assert await exact.submit(shell) is not None
    shell.store.insert_fact.assert_awaited_once()


@pytest.mark.asyncio
async def test_bad_url_shows_inline_error(shell):
    shell.store.insert_fact = AsyncMock()
    form = _form(source="ftp://x.com")

    assert await form.submit(shell) is None
    assert form.is_valid_url is False
    shell.store.insert_fact.assert_not_called()

    # editing the source clears the error
    form.set_source("https://x.com")
    assert form.is_valid_url is True


@pytest.mark.asyncio
async def test_bad_url_reported_even_when_text_missing(shell):
    form = _form(text="", source="nope")
    assert await form.submit(shell) is None
    assert form.is_valid_url is False


@pytest.mark.asyncio
async def test_missing_text_or_category_is_silent(shell):
    shell.store.insert_fact = AsyncMock()
    for form in (_form(text=""), _form(category="")):
        assert await form.submit(shell) is None
        assert form.is_valid_url is True
    shell.store.insert_fact.assert_not_called()


@pytest.mark.asyncio
async def test_store_failure_keeps_fields(shell):
    await shell.start()
    shell.show_form = True
    shell.store.fail_with = "insert rejected"
    form = _form()

    assert await form.submit(shell) is None
    assert form.text == "Honey never spoils"
    assert form.source == "https://x.com"
    assert form.category == "history"
    assert form.is_uploading is False
    assert shell.show_form is True
    assert len(shell.facts) == 5


@pytest.mark.asyncio
async def test_uploading_flag_set_during_insert(shell):
    form = _form()
    observed = {}

    async def insert(text, source, category):
        observed["uploading"] = form.is_uploading
        raise StoreError("nope")

    shell.store.insert_fact = insert
    await form.submit(shell)
    assert observed["uploading"] is True
    assert form.is_uploading is False
