"""
Authenticator for the UKG LoginService.

Exchanges the long-lived credentials (customer key, user key, username,
password) for a short-lived session token. The token is valid for one
lookup only; it is never cached or reused across requests.
"""
import logging
from typing import Optional

from models.lookup_schemas import Credentials
from services.lookup_observer import LookupObserver, default_observer
from services.soap_client import SoapClient, SoapRemoteError, SoapTransportError
from services.xml_fields import extract_field

logger = logging.getLogger(__name__)


LOGIN_SERVICE = "LoginService"
LOGIN_OPERATION = "Authenticate"
LOGIN_BODY_ELEMENT = "contracts:TokenRequest"


class AuthenticationError(Exception):
    """Login failed or no token was returned."""
    pass


class Authenticator:
    """Obtains a session token from the LoginService.

    Example:
        authenticator = Authenticator(soap_client, credentials)
        token = await authenticator.authenticate()
    """

    def __init__(
        self,
        soap_client: SoapClient,
        credentials: Credentials,
        observer: Optional[LookupObserver] = None
    ):
        self.client = soap_client
        self.credentials = credentials
        self.observer = default_observer(logger, observer)

    async def authenticate(self) -> str:
        """Log in and return the session token.

        Raises:
            AuthenticationError: HTTP/transport failure or token missing
        """
        header_fields = {
            "ClientAccessKey": self.credentials.customer_key,
            "Password": self.credentials.password,
            "UserAccessKey": self.credentials.user_key,
            "UserName": self.credentials.username,
        }

        try:
            raw = await self.client.invoke(
                LOGIN_SERVICE,
                LOGIN_OPERATION,
                header_fields=header_fields,
                body_element=LOGIN_BODY_ELEMENT
            )
        except SoapRemoteError as e:
            self.observer.error("auth.failed", status_code=e.status_code)
            raise AuthenticationError(f"Login failed: HTTP {e.status_code}") from e
        except SoapTransportError as e:
            self.observer.error("auth.failed", reason=str(e))
            raise AuthenticationError(f"Login failed: {e}") from e

        # The backend varies its wrapper nesting, so search the whole response.
        token = extract_field(raw, "Token")
        if not token:
            self.observer.error("auth.failed", reason="token not found in response")
            raise AuthenticationError("Token not found in login response")

        self.observer.info("auth.succeeded")
        return token
