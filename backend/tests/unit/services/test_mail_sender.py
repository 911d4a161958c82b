"""Unit tests for GmailSender against a mocked Google API."""

from __future__ import annotations

import base64
import json
from email import message_from_bytes
from email.message import EmailMessage
from email.policy import default

import httpx
import pytest

from app.services.mail_sender import SEND_URL, TOKEN_URL, GmailSender, render_html_body
from common.core.config_service import GmailSection

CONFIG = GmailSection(client_id="cid", client_secret="secret", refresh_token="refresh", sender_email="team@example.com")


def _decode(raw: str) -> EmailMessage:
    padded = raw + "=" * (-len(raw) % 4)
    return message_from_bytes(base64.urlsafe_b64decode(padded), policy=default)  # type: ignore[return-value]


def _sender(handler) -> tuple[GmailSender, list[httpx.Request]]:
    requests: list[httpx.Request] = []

    def _record(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(_record))
    return GmailSender(CONFIG, client=client), requests


def _google(request: httpx.Request) -> httpx.Response:
    if str(request.url) == TOKEN_URL:
        return httpx.Response(200, json={"access_token": "ya29.token"})
    return httpx.Response(200, json={"id": "msg_1"})


def test_render_html_body_converts_newlines() -> None:
    html = render_html_body("Hi Jo,\n\nWelcome!")

    assert "Hi Jo,<br><br>Welcome!" in html
    assert html.lstrip().startswith("<!DOCTYPE html>")


def test_build_raw_message_headers_and_body() -> None:
    sender = GmailSender(CONFIG)

    message = _decode(sender.build_raw_message("jo@example.com", "Welcome!", "Line one\nLine two", reply_to="help@example.com"))

    assert message["From"] == "Neuro Progeny <team@example.com>"
    assert message["To"] == "jo@example.com"
    assert message["Subject"] == "Welcome!"
    assert message["Reply-To"] == "help@example.com"
    assert message.get_content_type() == "text/html"
    assert "Line one<br>Line two" in message.get_content()


@pytest.mark.asyncio
async def test_send_exchanges_refresh_token_then_posts_message() -> None:
    sender, requests = _sender(_google)

    assert await sender.send("jo@example.com", "Hello", "Body")

    token_request, send_request = requests
    assert str(token_request.url) == TOKEN_URL
    assert b"grant_type=refresh_token" in token_request.content
    assert str(send_request.url) == SEND_URL
    assert send_request.headers["Authorization"] == "Bearer ya29.token"
    raw = json.loads(send_request.content)["raw"]
    assert _decode(raw)["To"] == "jo@example.com"


@pytest.mark.asyncio
async def test_send_returns_false_when_token_refresh_fails() -> None:
    sender, requests = _sender(lambda _: httpx.Response(400, json={"error": "invalid_grant"}))

    assert await sender.send("jo@example.com", "Hello", "Body") is False
    assert len(requests) == 1


@pytest.mark.asyncio
async def test_send_returns_false_on_api_error() -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        if str(request.url) == TOKEN_URL:
            return httpx.Response(200, json={"access_token": "ya29.token"})
        return httpx.Response(403, json={"error": {"message": "insufficient scope"}})

    sender, _ = _sender(_handler)

    assert await sender.send("jo@example.com", "Hello", "Body") is False


@pytest.mark.asyncio
async def test_send_returns_false_on_network_error() -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    sender, _ = _sender(_handler)

    assert await sender.send("jo@example.com", "Hello", "Body") is False


@pytest.mark.asyncio
async def test_unconfigured_sender_sends_nothing() -> None:
    requests: list[httpx.Request] = []
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: requests.append(r) or _google(r)))
    sender = GmailSender(GmailSection(client_id="cid"), client=client)

    assert not sender.is_configured
    assert await sender.send("jo@example.com", "Hello", "Body") is False
    assert requests == []
