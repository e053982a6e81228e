"""Outlook (Office365) mailer sending MIME mail through the Microsoft Graph API.

Authentication uses the OAuth2 client credentials grant. The access token is
fetched once, when the mailer is created, and is never refreshed: a mailer
kept alive beyond the token lifetime (typically one hour) fails every send
with ``SendMailRejectedError`` (HTTP 401) and must be rebuilt.

Example:
    >>> mailer = await OutlookMailer.new(
    ...     "<Microsoft Identity service tenant>",
    ...     "<OAuth2 app GUID>",
    ...     Secret("<OAuth2 app secret>"),
    ... )
    >>> await mailer.send_mail(message)
"""

import base64
from typing import Optional

import httpx
from pydantic import BaseModel, SecretStr, ValidationError

from async_mailer.core.mailer import ArcMailer, BoxMailer, Mailer
from async_mailer.core.message import Message
from async_mailer.core.util import format_recipient_addresses
from async_mailer.utils.errors import (
    AccessTokenParseError,
    AccessTokenRequestError,
    AccessTokenResponseError,
    OutlookMailerError,
    SendMailRejectedError,
    SendMailRequestError,
    SendMailResponseBodyError,
)
from async_mailer.utils.logging import async_log_call, get_logger

from .constants import ContentTypes, Endpoints, OAuth2

logger = get_logger(__name__)


class TokenResponse(BaseModel):
    """The Microsoft Identity service access token success response."""

    # token_type, expires_in and ext_expires_in are ignored
    access_token: str


class OutlookMailer(Mailer[OutlookMailerError]):
    """Mailer sending via the Microsoft Graph API, authenticated by OAuth2
    client credentials grant.

    The HTTP client is shared by all sends; concurrent sends are independent
    requests carrying the same read-only access token.
    """

    error_type = OutlookMailerError

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        access_token: SecretStr,
        owns_client: bool = False,
    ):
        """Initialise with an HTTP client and an already retrieved token.

        Use ``OutlookMailer.new`` to retrieve the token.
        """
        self._http_client = http_client
        self._access_token = access_token
        self._owns_client = owns_client

    @classmethod
    @async_log_call
    async def new(
        cls,
        tenant: str,
        app_guid: str,
        secret: SecretStr,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> "OutlookMailer":
        """Create a new Outlook mailer.

        Args:
            tenant: Microsoft Identity service tenant
            app_guid: OAuth2 application (client) ID
            secret: OAuth2 application client secret
            http_client: Optional client to reuse; one is created if omitted

        Raises:
            AccessTokenRequestError: If the token request cannot be sent
            AccessTokenResponseError: If the token response cannot be received
            AccessTokenParseError: If the token response cannot be parsed
        """
        owns_client = http_client is None
        client = http_client or httpx.AsyncClient()

        try:
            access_token = await cls.get_access_token(tenant, app_guid, secret, client)
        except BaseException:
            # Includes cancellation while the token request is in flight.
            if owns_client:
                await client.aclose()
            raise

        return cls(client, access_token, owns_client=owns_client)

    @classmethod
    async def new_box(
        cls,
        tenant: str,
        app_guid: str,
        secret: SecretStr,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> BoxMailer:
        """Create a new Outlook mailer as dynamic ``BoxMailer``."""
        return (await cls.new(tenant, app_guid, secret, http_client)).new_dyn()

    @classmethod
    async def new_arc(
        cls,
        tenant: str,
        app_guid: str,
        secret: SecretStr,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> ArcMailer:
        """Create a new Outlook mailer as dynamic ``ArcMailer``."""
        return (await cls.new(tenant, app_guid, secret, http_client)).new_dyn()

    @staticmethod
    async def get_access_token(
        tenant: str,
        client_id: str,
        client_secret: SecretStr,
        http_client: httpx.AsyncClient,
    ) -> SecretStr:
        """Retrieve an OAuth2 client credentials grant access token.

        Raises:
            AccessTokenRequestError: On request failure
            AccessTokenResponseError: On response failure
            AccessTokenParseError: On JSON parse failure
        """
        token_url = Endpoints.TOKEN_URL.format(tenant=tenant)

        form_data = {
            "client_id": client_id,
            "client_secret": client_secret.get_secret_value(),
            "grant_type": OAuth2.GRANT_TYPE,
            "scope": " ".join(OAuth2.SCOPES),
        }

        try:
            request = http_client.build_request("POST", token_url, data=form_data)
            response = await http_client.send(request, stream=True)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(
                "Failed to request access token",
                extra={"tenant": tenant, "error": str(e)},
            )
            raise AccessTokenRequestError(details={"tenant": tenant}) from e

        try:
            response_data = await response.aread()
        except httpx.HTTPError as e:
            logger.error(
                "Failed to receive access token response",
                extra={"tenant": tenant, "error": str(e)},
            )
            raise AccessTokenResponseError(details={"tenant": tenant}) from e
        finally:
            await response.aclose()

        try:
            token_response = TokenResponse.model_validate_json(response_data)
        except ValidationError as e:
            logger.error(
                "Failed to parse access token response",
                extra={"tenant": tenant, "status_code": response.status_code},
            )
            raise AccessTokenParseError(
                details={"tenant": tenant, "status_code": response.status_code}
            ) from e

        logger.debug("Retrieved Microsoft Graph API access token", extra={"tenant": tenant})
        return SecretStr(token_response.access_token)

    async def send_mail(self, message: Message) -> None:
        """Send the prepared MIME message via the Microsoft Graph API.

        Raises:
            SendMailRequestError: If the request cannot be transmitted
            SendMailRejectedError: If the API answers with a non-success status
            SendMailResponseBodyError: If the response body cannot be read
        """
        from_address = message.mail_from.email
        recipient_addresses = format_recipient_addresses(message)

        logger.info(f"Sending Outlook mail to {recipient_addresses}...")

        # The MIME endpoint expects the message base64 encoded, not raw bytes.
        message_base64 = base64.b64encode(message.body).decode("ascii")

        headers = {
            "Authorization": f"Bearer {self._access_token.get_secret_value()}",
            "Content-Type": ContentTypes.MIME_BASE64,
        }

        try:
            request = self._http_client.build_request(
                "POST",
                Endpoints.SEND_MAIL_URL.format(from_address=from_address),
                headers=headers,
                content=message_base64,
            )
            response = await self._http_client.send(request, stream=True)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(
                f"Failed to send Outlook mail to {recipient_addresses}",
                extra={"error": str(e)},
            )
            raise SendMailRequestError(details={"from": from_address}) from e

        try:
            # Status is decided before the body is consumed.
            success = response.is_success

            if success:
                logger.info(f"Sent Outlook mail to {recipient_addresses}")
            else:
                logger.error(
                    f"Failed to send Outlook mail to {recipient_addresses}",
                    extra={"status_code": response.status_code},
                )

            try:
                await response.aread()
            except httpx.HTTPError as e:
                raise SendMailResponseBodyError(
                    details={"status_code": response.status_code}
                ) from e

            response_text = response.text
            if success:
                logger.debug(response_text)
            else:
                logger.error(response_text)
        finally:
            await response.aclose()

        if not success:
            raise SendMailRejectedError(
                f"{SendMailRejectedError.user_message}: "
                f"HTTP {response.status_code} {response.reason_phrase}",
                details={"from": from_address, "status_code": response.status_code},
                status_code=response.status_code,
                response_text=response_text,
            )

    async def aclose(self) -> None:
        """Close the HTTP client if this mailer created it."""
        if self._owns_client:
            await self._http_client.aclose()

    async def __aenter__(self) -> "OutlookMailer":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"OutlookMailer(access_token={self._access_token!r})"
