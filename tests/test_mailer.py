"""Unit tests for app.services.mailer: templates, no-op without SMTP and quiet failures."""

import smtplib
import unittest
from unittest.mock import MagicMock, patch

from app.services.mailer import Mailer, MailerError, build_message


def _settings(host: str | None = "smtp.example.com") -> MagicMock:
    settings = MagicMock()
    settings.SMTP_HOST = host
    settings.SMTP_PORT = 587
    settings.SMTP_USERNAME = "mailer"
    settings.SMTP_PASSWORD = None
    settings.SMTP_SECURE = "tls"
    settings.SMTP_TIMEOUT_SEC = 5.0
    settings.EMAIL_FROM = "no-reply@reyes.test"
    settings.EMAIL_FROM_NAME = "Los Reyes del Usado"
    return settings


class TestBuildMessage(unittest.TestCase):
    def test_renders_recovery_link(self) -> None:
        msg = build_message(_settings(), "ana@example.com", "recovery", {"link": "http://x/reset?token=t", "minutes": 60})
        self.assertEqual(msg["To"], "ana@example.com")
        self.assertIn("no-reply@reyes.test", msg["From"])
        self.assertIn("http://x/reset?token=t", msg.get_content())

    def test_unknown_template(self) -> None:
        with self.assertRaises(MailerError):
            build_message(_settings(), "a@b.co", "newsletter", {})

    def test_missing_value(self) -> None:
        with self.assertRaises(MailerError):
            build_message(_settings(), "a@b.co", "activation", {"name": "Ana"})


class TestMailerSend(unittest.TestCase):
    """Delivery goes through smtplib; unconfigured SMTP is a logged no-op."""

    def test_not_configured_skips(self) -> None:
        mailer = Mailer(_settings(host=None))
        with patch("app.services.mailer.smtplib.SMTP") as smtp:
            self.assertFalse(mailer.send("a@b.co", "account_activated", {"name": "Ana"}))
        smtp.assert_not_called()

    def test_delivers_with_starttls(self) -> None:
        with patch("app.services.mailer.smtplib.SMTP") as smtp:
            sent = Mailer(_settings()).send("a@b.co", "account_activated", {"name": "Ana"})
        self.assertTrue(sent)
        server = smtp.return_value
        server.starttls.assert_called_once()
        server.send_message.assert_called_once()

    def test_send_raises_on_smtp_failure(self) -> None:
        with patch("app.services.mailer.smtplib.SMTP", side_effect=smtplib.SMTPConnectError(421, "down")):
            with self.assertRaises(MailerError):
                Mailer(_settings()).send("a@b.co", "account_activated", {"name": "Ana"})

    def test_send_quietly_swallows_delivery_errors(self) -> None:
        with patch("app.services.mailer.smtplib.SMTP", side_effect=OSError("unreachable")):
            self.assertFalse(Mailer(_settings()).send_quietly("a@b.co", "account_activated", {"name": "Ana"}))


if __name__ == "__main__":
    unittest.main()
