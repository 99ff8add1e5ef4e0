from typing import Protocol, runtime_checkable

@runtime_checkable
class MailerPort(Protocol):
    async def send(self, to: str, subject: str, html: str) -> str | None: ...
