"""Gmail API mail sender.

Sends HTML mail through `users/me/messages/send` using the OAuth refresh-token
flow. `send` never raises: every failure is logged and reported as False.
"""

from __future__ import annotations

import base64
from email.message import EmailMessage
from email.utils import formataddr
from typing import Any, override

import httpx
from jinja2 import Environment, PackageLoader, select_autoescape
from markupsafe import Markup

from common.core.config_service import GmailSection
from common.core.lifecycle import Lifecycle
from common.utils.utils import get_logger

logger = get_logger()

TOKEN_URL = "https://oauth2.googleapis.com/token"
SEND_URL = "https://www.googleapis.com/gmail/v1/users/me/messages/send"
SENDER_DISPLAY_NAME = "Neuro Progeny"


def _nl2br(value: str) -> Markup:
    # Template bodies are administrator-authored and may contain markup
    return Markup(value.replace("\n", "<br>"))


_templates = Environment(loader=PackageLoader("app", "templates"), autoescape=select_autoescape(["html"]))
_templates.filters["nl2br"] = _nl2br


def render_html_body(body: str) -> str:
    """Wrap plain text in the email layout, turning newlines into `<br>`."""
    return _templates.get_template("email/layout.html").render(body=body)


class MailSendError(Exception):
    pass


class GmailSender(Lifecycle):
    _config: GmailSection
    _client: httpx.AsyncClient | None
    _owns_client: bool

    def __init__(self, config: GmailSection, client: httpx.AsyncClient | None = None) -> None:
        super().__init__()
        self._config = config
        self._client = client
        self._owns_client = client is None

    @property
    def is_configured(self) -> bool:
        return self._config.is_configured

    @override
    async def _start(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(15.0))

    @override
    async def _stop(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    def build_raw_message(self, to: str, subject: str, body: str, reply_to: str | None = None) -> str:
        """Base64url-encoded RFC 822 message, without padding, as the Gmail API expects."""
        message = EmailMessage()
        message["From"] = formataddr((SENDER_DISPLAY_NAME, self._config.sender_email))
        message["To"] = to
        message["Subject"] = subject
        if reply_to:
            message["Reply-To"] = reply_to
        message.set_content(render_html_body(body), subtype="html", charset="utf-8")
        return base64.urlsafe_b64encode(message.as_bytes()).decode("ascii").rstrip("=")

    async def send(self, to: str, subject: str, body: str, reply_to: str | None = None) -> bool:
        if not self.is_configured:
            logger.error("Gmail credentials not configured", to=to)
            return False

        try:
            client = self._get_client()
            access_token = await self._get_access_token(client)
            response = await client.post(
                SEND_URL,
                headers={"Authorization": f"Bearer {access_token}"},
                json={"raw": self.build_raw_message(to, subject, body, reply_to)},
            )
            if response.is_error:
                logger.error("Gmail send error", to=to, status_code=response.status_code, response=response.text)
                return False
        except (httpx.HTTPError, MailSendError) as e:
            logger.exception("Email send failed", to=to, error=str(e))
            return False

        logger.info("Email sent", to=to, subject=subject)
        return True

    async def _get_access_token(self, client: httpx.AsyncClient) -> str:
        response = await client.post(
            TOKEN_URL,
            data={
                "client_id": self._config.client_id,
                "client_secret": self._config.client_secret,
                "refresh_token": self._config.refresh_token,
                "grant_type": "refresh_token",
            },
        )
        try:
            data: dict[str, Any] = response.json()
        except ValueError as e:
            raise MailSendError(f"Token endpoint returned non-JSON ({response.status_code})") from e

        access_token = data.get("access_token")
        if not access_token:
            logger.error("Failed to get Gmail access token", status_code=response.status_code, error=data.get("error"))
            raise MailSendError("Failed to get Gmail access token")
        return str(access_token)

    def _get_client(self) -> httpx.AsyncClient:
        # Senders used outside the app lifespan (CLI, tests) get a client on first use
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(15.0))
        return self._client
