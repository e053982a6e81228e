"""Microsoft Identity service and Graph API endpoints."""


class Endpoints:
    """URL templates for the Microsoft identity and Graph APIs."""

    # OAuth2 client credentials grant token endpoint
    TOKEN_URL = "https://login.microsoftonline.com/{tenant}/oauth2/v2.0/token"

    # MIME-format sendMail endpoint, see
    # https://learn.microsoft.com/en-us/graph/api/user-sendmail?view=graph-rest-1.0
    SEND_MAIL_URL = "https://graph.microsoft.com/v1.0/users/{from_address}/sendMail"


class OAuth2:
    """Client credentials grant parameters."""

    GRANT_TYPE = "client_credentials"
    SCOPES = ["https://graph.microsoft.com/.default"]


class ContentTypes:
    """Request content types used by the Graph API."""

    MIME_BASE64 = "text/plain"
