import logging
from app.platform.ports.mailer import MailerPort

log = logging.getLogger("mail.noop")

class NoopMailer(MailerPort):
    async def send(self, to: str, subject: str, html: str) -> str | None:
        log.info(f"[NOOP MAIL] to={to} subject={subject!r} bytes={len(html)}")
        return None
