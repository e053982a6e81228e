"""
Shared test fixtures and configuration for pytest
"""
import json
import os
from email.message import EmailMessage
from unittest.mock import patch

import pytest

from async_mailer import Secret

from .test_helpers import (
    GraphTestHelper,
    LocalTLSServer,
    MessageTestHelper,
    SMTPTestHelper,
)


@pytest.fixture
def message():
    """Sample prepared message"""
    return MessageTestHelper.create_message(
        rcpt_to=["a@x.example", "b@y.example"],
    )


@pytest.fixture
def email_message():
    """Sample composed standard library message"""
    msg = EmailMessage()
    msg["From"] = "From Name <from@example.com>"
    msg["To"] = "To Name <to@example.com>, second@example.com"
    msg["Cc"] = "cc@example.com"
    msg["Bcc"] = "hidden@example.com"
    msg["Subject"] = "Subject"
    msg.set_content("Mail body")
    return msg


@pytest.fixture
def graph():
    """Fake identity service and Graph API"""
    return GraphTestHelper()


@pytest.fixture
def secret():
    return Secret("app-secret-value")


@pytest.fixture
def mock_smtp():
    """Patch aiosmtplib.SMTP and yield (factory mock, client mock)"""
    client = SMTPTestHelper.create_mock_smtp()
    with patch("async_mailer.smtp.mailer.aiosmtplib.SMTP", return_value=client) as factory:
        yield factory, client


@pytest.fixture
def write_config(tmp_path):
    """Write a mailer configuration JSON file and return its path"""

    def _write(data, name="mailer.json"):
        path = tmp_path / name
        path.write_text(json.dumps(data) if not isinstance(data, str) else data)
        return path

    return _write


@pytest.fixture(autouse=True)
def clear_env_vars():
    """Clear credential environment variables before each test"""
    original = {
        key: value for key, value in os.environ.items() if key.startswith("ASYNC_MAILER_")
    }
    for key in original:
        del os.environ[key]

    yield

    for key in [k for k in os.environ if k.startswith("ASYNC_MAILER_")]:
        del os.environ[key]
    os.environ.update(original)


@pytest.fixture
def tls_smtp_server():
    """Start local STARTTLS servers on demand, stopping them afterwards"""
    servers = []

    def _start(refuse=()):
        server = LocalTLSServer(refuse).start()
        servers.append(server)
        return server

    yield _start

    for server in servers:
        server.stop()
