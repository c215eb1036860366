"""Tests for Resend email delivery."""

from unittest.mock import patch

from golflesson.config.types import MailConfig
from golflesson.services.mail_service import MailService


def test_send_uses_resend():
    service = MailService(MailConfig(api_key="re_test", from_email="lesson@example.com", from_name="Golf Lesson"))

    with patch("golflesson.services.mail_service.resend.Emails.send", return_value={"id": "email-123"}) as send:
        result = service.send("taro@example.com", "件名", "<p>本文</p>")

    assert result.success is True
    assert result.id == "email-123"
    send.assert_called_once_with({
        "from": "Golf Lesson <lesson@example.com>",
        "to": ["taro@example.com"],
        "subject": "件名",
        "html": "<p>本文</p>",
    })

def test_send_sets_api_key():
    service = MailService(MailConfig(api_key="re_secret"))

    with patch("golflesson.services.mail_service.resend") as resend:
        resend.Emails.send.return_value = {"id": "email-1"}
        service.send("taro@example.com", "件名", "<p></p>")

    assert resend.api_key == "re_secret"

def test_send_failure_is_returned():
    service = MailService(MailConfig(api_key="re_test"))

    with patch("golflesson.services.mail_service.resend.Emails.send", side_effect=Exception("422 invalid from")):
        result = service.send("taro@example.com", "件名", "<p></p>")

    assert result.success is False
    assert result.error == "メール送信に失敗しました"

def test_disabled_without_api_key():
    service = MailService(MailConfig(api_key=""))
    assert service.is_enabled() is False

    with patch("golflesson.services.mail_service.resend.Emails.send") as send:
        result = service.send("taro@example.com", "件名", "<p></p>")

    assert result.success is False
    send.assert_not_called()
