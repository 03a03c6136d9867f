# tests/test_collaborators.py
import smtplib
from unittest.mock import MagicMock, patch

import pytest

from app.core.clients import build_mailer, build_token_verifier
from app.core.exceptions import UpstreamError
from app.auth.tokens import HmacTokenVerifier, UnverifiedTokenDecoder
from app.notifications.email import LoggingEmailSender, SmtpEmailSender
from app.notifications.scheduler import CONSUMER_JOB_ID, REMINDER_JOB_ID, build_scheduler
from app.storage.blobs import LocalBlobStore


@patch("app.notifications.email.smtplib.SMTP")
def test_smtp_sender_sends_plain_text(mock_smtp):
    server = MagicMock()
    mock_smtp.return_value.__enter__.return_value = server

    sender = SmtpEmailSender("smtp.example.com", 587, "helpdesk@example.com", username="bot", password="pw")
    sender.send("helpdesk@example.com", "Subject", "Body text")

    mock_smtp.assert_called_once_with("smtp.example.com", 587, timeout=30)
    server.starttls.assert_called_once()
    server.login.assert_called_once_with("bot", "pw")
    from_addr, to_addrs, message = server.sendmail.call_args.args
    assert from_addr == "helpdesk@example.com"
    assert to_addrs == ["helpdesk@example.com"]
    assert "Subject: Subject" in message
    assert "text/plain" in message


@patch("app.notifications.email.smtplib.SMTP")
def test_smtp_sender_wraps_failures(mock_smtp):
    mock_smtp.side_effect = smtplib.SMTPConnectError(421, "busy")

    sender = SmtpEmailSender("smtp.example.com", 25, "helpdesk@example.com", use_tls=False)
    with pytest.raises(UpstreamError) as exc_info:
        sender.send("helpdesk@example.com", "Subject", "Body")
    assert exc_info.value.message == "Could not send email"


def test_mailer_falls_back_to_logging(settings):
    assert isinstance(build_mailer(settings), LoggingEmailSender)
    assert isinstance(build_mailer(settings.model_copy(update={"SMTP_HOST": "smtp.example.com"})), SmtpEmailSender)


def test_token_verifier_selection(settings):
    assert isinstance(build_token_verifier(settings), UnverifiedTokenDecoder)
    signed = settings.model_copy(update={"AUTH_JWT_SECRET": "shared-secret-for-gateway-tokens-1234"})
    assert isinstance(build_token_verifier(signed), HmacTokenVerifier)


def test_local_blob_store_writes_file(tmp_path):
    blobs = LocalBlobStore(tmp_path, "https://files.example.com/")
    url = blobs.store(b"png bytes", "image/png")

    assert url.startswith("https://files.example.com/tickets/")
    assert url.endswith(".png")
    key = url.removeprefix("https://files.example.com/")
    assert (tmp_path / key).read_bytes() == b"png bytes"


def test_local_blob_store_unknown_type(tmp_path):
    url = LocalBlobStore(tmp_path, "/uploads").store(b"x", "application/x-made-up")
    assert url.endswith(".bin")


def test_local_blob_store_failure(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("file in the way")
    with pytest.raises(UpstreamError):
        LocalBlobStore(blocker, "/uploads").store(b"x", "image/png")


def test_scheduler_jobs(settings, clients):
    scheduler = build_scheduler(
        settings.model_copy(update={"REMINDER_HOUR": 7, "REMINDER_MINUTE": 30, "QUEUE_POLL_SECONDS": 5}),
        clients.event_queue,
        clients.dispatcher,
    )
    jobs = {job.id: job for job in scheduler.get_jobs()}
    assert set(jobs) == {CONSUMER_JOB_ID, REMINDER_JOB_ID}

    reminder = str(jobs[REMINDER_JOB_ID].trigger)
    assert "hour='7'" in reminder
    assert "minute='30'" in reminder
    assert jobs[CONSUMER_JOB_ID].trigger.interval.total_seconds() == 5
