import logging
import httpx
from app.core.config import settings
from app.platform.ports.mailer import MailerPort

log = logging.getLogger("mail.http")

class HttpMailer(MailerPort):
    """Delivers through a JSON mail API (Resend-compatible payload)."""

    def __init__(self, api_url: str | None = None, api_key: str | None = None, sender: str | None = None,
                 transport: httpx.AsyncBaseTransport | None = None):
        self.api_url = api_url or settings.EMAIL_API_URL
        self.api_key = api_key or settings.EMAIL_API_KEY
        self.sender = sender or settings.EMAIL_FROM
        self.transport = transport

    async def send(self, to: str, subject: str, html: str) -> str | None:
        if not self.api_key:
            raise ValueError("EMAIL_API_KEY is required for the http mail provider")
        headers = {"Authorization": f"Bearer {self.api_key}"}
        payload = {"from": self.sender, "to": [to], "subject": subject, "html": html}
        async with httpx.AsyncClient(timeout=10.0, transport=self.transport) as client:
            response = await client.post(self.api_url, json=payload, headers=headers)
            response.raise_for_status()
            data = response.json()
        log.info(f"Mail accepted by provider to={to} id={data.get('id')}")
        return data.get("id")
