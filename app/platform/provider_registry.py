from app.core.config import settings
from app.platform.ports.mailer import MailerPort
from app.platform.adapters.mail_noop import NoopMailer
from app.platform.adapters.mail_http import HttpMailer

class ProviderRegistry:
    _mailer: MailerPort | None = None

    @classmethod
    def mailer(cls) -> MailerPort:
        if cls._mailer is None:
            if settings.EMAIL_PROVIDER == "http":
                cls._mailer = HttpMailer()
            else:
                cls._mailer = NoopMailer()
        return cls._mailer

    @classmethod
    def override_mailer(cls, mailer: MailerPort | None) -> None:
        cls._mailer = mailer

registry = ProviderRegistry()
