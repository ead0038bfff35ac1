"""Transactional email over SMTP. A no-op (logged) when SMTP is not configured."""

import logging
import smtplib
import ssl
from email.message import EmailMessage
from email.utils import formataddr
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

TEMPLATES: dict[str, dict[str, str]] = {
    "activation": {
        "subject": "Activá tu cuenta en Los Reyes del Usado",
        "text": (
            "Hola {name},\n\n"
            "Gracias por registrarte. Para activar tu cuenta ingresá a:\n"
            "{link}\n"
        ),
    },
    "recovery": {
        "subject": "Recuperá tu contraseña",
        "text": (
            "Recibimos un pedido para restablecer tu contraseña.\n"
            "Ingresá al siguiente enlace para elegir una nueva:\n"
            "{link}\n\n"
            "Si no lo pediste, ignorá este correo. El enlace vence en {minutes} minutos.\n"
        ),
    },
    "password_changed": {
        "subject": "Tu contraseña fue actualizada",
        "text": (
            "Hola {name},\n\n"
            "Tu contraseña se actualizó correctamente. Si no fuiste vos, "
            "contactá a soporte de inmediato.\n"
        ),
    },
    "account_activated": {
        "subject": "Cuenta activada",
        "text": "Hola {name},\n\nTu cuenta quedó activada. Ya podés iniciar sesión.\n",
    },
}


class MailerError(Exception):
    """Raised when an email cannot be rendered or delivered."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)


def _is_smtp_configured(settings: "Settings") -> bool:
    return bool(settings.SMTP_HOST and (settings.EMAIL_FROM or settings.SMTP_USERNAME))


def build_message(settings: "Settings", to: str, template: str, data: dict[str, Any]) -> EmailMessage:
    """Render a template into an EmailMessage."""
    tpl = TEMPLATES.get(template)
    if tpl is None:
        raise MailerError(f"Unknown email template: {template}")
    try:
        body = tpl["text"].format(**data)
    except KeyError as e:
        raise MailerError(f"Missing value {e} for template {template}", cause=e) from e
    sender = settings.EMAIL_FROM or settings.SMTP_USERNAME or ""
    msg = EmailMessage()
    msg["Subject"] = tpl["subject"]
    msg["From"] = formataddr((settings.EMAIL_FROM_NAME, sender))
    msg["To"] = to
    msg.set_content(body)
    return msg


class Mailer:
    """Send templated emails with the configured SMTP server."""

    def __init__(self, settings: "Settings") -> None:
        self.settings = settings

    @property
    def is_configured(self) -> bool:
        return _is_smtp_configured(self.settings)

    def _deliver(self, msg: EmailMessage) -> None:
        s = self.settings
        password = s.SMTP_PASSWORD.get_secret_value() if s.SMTP_PASSWORD else None
        context = ssl.create_default_context()
        if s.SMTP_SECURE == "ssl":
            server: smtplib.SMTP = smtplib.SMTP_SSL(
                s.SMTP_HOST, s.SMTP_PORT, timeout=s.SMTP_TIMEOUT_SEC, context=context
            )
        else:
            server = smtplib.SMTP(s.SMTP_HOST, s.SMTP_PORT, timeout=s.SMTP_TIMEOUT_SEC)
        with server:
            if s.SMTP_SECURE == "tls":
                server.starttls(context=context)
            if s.SMTP_USERNAME and password:
                server.login(s.SMTP_USERNAME, password)
            server.send_message(msg)

    def send(self, to: str, template: str, data: dict[str, Any]) -> bool:
        """
        Render and send one email. Returns True when delivered.

        Returns False (and logs) when SMTP is not configured. Raises
        MailerError on render or delivery failure.
        """
        msg = build_message(self.settings, to, template, data)
        if not self.is_configured:
            logger.info("SMTP not configured; skipping email", extra={"template": template})
            return False
        try:
            self._deliver(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise MailerError(f"Could not send '{template}' email", cause=e) from e
        logger.info("Email sent", extra={"template": template})
        return True

    def send_quietly(self, to: str, template: str, data: dict[str, Any]) -> bool:
        """Send without failing the caller; delivery problems are logged."""
        try:
            return self.send(to, template, data)
        except MailerError as e:
            logger.warning(
                "Email delivery failed",
                extra={"template": template, "error": e.message, "cause": str(e.cause)},
            )
            return False
