"""
Tests for the SMTP mailer

Tests cover:
- Construction without network I/O
- TLS mode and certificate policy passed to aiosmtplib
- Connect / send failure mapping
- One connection per send
- Partial recipient refusal
- Delivery to a local STARTTLS server with an untrusted certificate
"""
import aiosmtplib
import pytest

from async_mailer import DynMailerError, Secret, SmtpInvalidCertsPolicy, SmtpMailer
from async_mailer.smtp.constants import Timeouts
from async_mailer.utils.errors import SmtpConnectError, SmtpMailerError, SmtpSendError

from .test_helpers import MessageTestHelper


def make_mailer(port=465, invalid_certs=SmtpInvalidCertsPolicy.DENY):
    return SmtpMailer(
        "smtp.example.com",
        port,
        invalid_certs,
        "user@example.com",
        Secret("smtp-password"),
    )


class TestSmtpInvalidCertsPolicy:
    """Tests for SmtpInvalidCertsPolicy"""

    def test_values(self):
        assert SmtpInvalidCertsPolicy("allow") is SmtpInvalidCertsPolicy.ALLOW
        assert SmtpInvalidCertsPolicy("deny") is SmtpInvalidCertsPolicy.DENY

    def test_str_is_value(self):
        assert str(SmtpInvalidCertsPolicy.ALLOW) == "allow"

    def test_invalid_value(self):
        with pytest.raises(ValueError):
            SmtpInvalidCertsPolicy("maybe")


class TestSmtpMailerConstruction:
    """Tests for SmtpMailer construction"""

    def test_constructor_does_no_io(self, mock_smtp):
        factory, client = mock_smtp
        make_mailer()

        factory.assert_not_called()
        client.connect.assert_not_called()

    def test_constructor_accepts_policy_string(self):
        mailer = make_mailer(invalid_certs="allow")
        assert mailer.invalid_certs is SmtpInvalidCertsPolicy.ALLOW

    def test_repr_redacts_password(self):
        text = repr(make_mailer())

        assert "smtp-password" not in text
        assert "smtp.example.com" in text

    def test_new_box_and_new_arc_are_dynamic(self):
        args = ("smtp.example.com", 465, SmtpInvalidCertsPolicy.DENY, "u", Secret("p"))

        assert isinstance(SmtpMailer.new_box(*args).inner, SmtpMailer)
        assert isinstance(SmtpMailer.new_arc(*args).inner, SmtpMailer)


class TestSmtpClientSettings:
    """Tests for the aiosmtplib client settings"""

    @pytest.mark.asyncio
    async def test_deny_validates_certificates(self, mock_smtp, message):
        factory, _ = mock_smtp
        await make_mailer(invalid_certs=SmtpInvalidCertsPolicy.DENY).send_mail(message)

        assert factory.call_args.kwargs["validate_certs"] is True

    @pytest.mark.asyncio
    async def test_allow_skips_certificate_validation(self, mock_smtp, message):
        factory, _ = mock_smtp
        await make_mailer(invalid_certs=SmtpInvalidCertsPolicy.ALLOW).send_mail(message)

        assert factory.call_args.kwargs["validate_certs"] is False

    @pytest.mark.asyncio
    async def test_port_465_uses_implicit_tls(self, mock_smtp, message):
        factory, _ = mock_smtp
        await make_mailer(port=465).send_mail(message)

        kwargs = factory.call_args.kwargs
        assert kwargs["use_tls"] is True
        assert kwargs["start_tls"] is False

    @pytest.mark.asyncio
    async def test_port_587_uses_starttls(self, mock_smtp, message):
        factory, _ = mock_smtp
        await make_mailer(port=587).send_mail(message)

        kwargs = factory.call_args.kwargs
        assert kwargs["use_tls"] is False
        assert kwargs["start_tls"] is True

    @pytest.mark.asyncio
    async def test_credentials_and_timeout(self, mock_smtp, message):
        factory, _ = mock_smtp
        await make_mailer().send_mail(message)

        kwargs = factory.call_args.kwargs
        assert kwargs["hostname"] == "smtp.example.com"
        assert kwargs["port"] == 465
        assert kwargs["username"] == "user@example.com"
        assert kwargs["password"] == "smtp-password"
        assert kwargs["timeout"] == Timeouts.SMTP_OPERATION == 30.0


class TestSmtpSendMail:
    """Tests for SmtpMailer.send_mail"""

    @pytest.mark.asyncio
    async def test_sends_envelope_and_body(self, mock_smtp, message):
        _, client = mock_smtp
        await make_mailer().send_mail(message)

        client.connect.assert_awaited_once()
        client.sendmail.assert_awaited_once_with(
            "sender@example.com",
            ["a@x.example", "b@y.example"],
            message.body,
        )
        client.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_connection_per_send(self, mock_smtp, message):
        factory, client = mock_smtp
        mailer = make_mailer()

        await mailer.send_mail(message)
        await mailer.send_mail(message)

        assert factory.call_count == 2
        assert client.sendmail.await_count == 2

    @pytest.mark.asyncio
    async def test_connect_failure(self, mock_smtp, message):
        _, client = mock_smtp
        client.connect.side_effect = aiosmtplib.SMTPConnectError("refused")

        with pytest.raises(SmtpConnectError) as exc_info:
            await make_mailer().send_mail(message)

        assert isinstance(exc_info.value, SmtpMailerError)
        assert isinstance(exc_info.value.__cause__, aiosmtplib.SMTPConnectError)
        client.sendmail.assert_not_awaited()
        client.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_authentication_failure_is_connect_error(self, mock_smtp, message):
        _, client = mock_smtp
        client.connect.side_effect = aiosmtplib.SMTPAuthenticationError(535, "bad login")

        with pytest.raises(SmtpConnectError):
            await make_mailer().send_mail(message)

    @pytest.mark.asyncio
    async def test_os_error_is_connect_error(self, mock_smtp, message):
        _, client = mock_smtp
        client.connect.side_effect = ConnectionRefusedError("refused")

        with pytest.raises(SmtpConnectError):
            await make_mailer().send_mail(message)

    @pytest.mark.asyncio
    async def test_send_failure(self, mock_smtp, message):
        _, client = mock_smtp
        client.sendmail.side_effect = aiosmtplib.SMTPRecipientsRefused([])

        with pytest.raises(SmtpSendError):
            await make_mailer().send_mail(message)

        client.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_partially_refused_recipients(self, mock_smtp, message):
        _, client = mock_smtp
        client.sendmail.return_value = ({"b@y.example": (550, "no such user")}, "OK")

        with pytest.raises(SmtpSendError) as exc_info:
            await make_mailer().send_mail(message)

        assert exc_info.value.details["refused"] == {"b@y.example": "550 no such user"}
        assert "b@y.example" in str(exc_info.value)
        client.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_dyn_form_erases_error(self, mock_smtp, message):
        _, client = mock_smtp
        client.sendmail.side_effect = aiosmtplib.SMTPDataError(554, "rejected")

        with pytest.raises(DynMailerError) as exc_info:
            await make_mailer().new_dyn().send_mail(message)

        assert isinstance(exc_info.value.__cause__, SmtpSendError)


class TestSmtpLocalServer:
    """Tests against a local server that requires STARTTLS and presents an
    untrusted certificate"""

    @pytest.mark.asyncio
    async def test_allow_delivers(self, tls_smtp_server):
        server = tls_smtp_server()
        message = MessageTestHelper.create_message(rcpt_to=["a@x.example", "b@y.example"])

        await server.mailer(SmtpInvalidCertsPolicy.ALLOW).send_mail(message)

        assert server.handler.delivered == [
            ("sender@example.com", ["a@x.example", "b@y.example"])
        ]

    @pytest.mark.asyncio
    async def test_deny_rejects_untrusted_certificate(self, tls_smtp_server):
        server = tls_smtp_server()

        with pytest.raises(SmtpConnectError):
            await server.mailer(SmtpInvalidCertsPolicy.DENY).send_mail(
                MessageTestHelper.create_message()
            )

        assert server.handler.delivered == []

    @pytest.mark.asyncio
    async def test_refused_recipient_fails_send(self, tls_smtp_server):
        server = tls_smtp_server(refuse=["bad@y.example"])
        message = MessageTestHelper.create_message(rcpt_to=["a@x.example", "bad@y.example"])

        with pytest.raises(SmtpSendError) as exc_info:
            await server.mailer(SmtpInvalidCertsPolicy.ALLOW).send_mail(message)

        assert list(exc_info.value.details["refused"]) == ["bad@y.example"]
