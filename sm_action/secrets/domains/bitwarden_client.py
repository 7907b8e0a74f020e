"""Bitwarden Secrets Manager gateway."""
import logging
import uuid
from typing import List, Set

from .errors import AuthenticationFailed, ResolutionFailed
from .models import SecretRecord, Session

logger = logging.getLogger(__name__)

USER_AGENT = "bitwarden/sm-action"


def _raise_for_response(response, error_cls):
    """SDK responses carry success/error_message instead of raising on some versions."""
    if response is not None and getattr(response, "success", True) is False:
        raise error_cls(getattr(response, "error_message", None) or "unknown error")


class BitwardenGateway:
    """Wrapper around the Bitwarden SDK client."""

    display_name = "Bitwarden"

    def __init__(self, api_url: str, identity_url: str):
        self.api_url = api_url
        self.identity_url = identity_url
        self._client = None

    @property
    def client(self):
        """
        Lazy-initialize client.

        The SDK ships a compiled extension, so it is imported only once a
        vault call is actually made.
        """
        if self._client is None:
            from bitwarden_sdk import BitwardenClient, DeviceType, client_settings_from_dict

            logger.debug(f"Using Bitwarden API {self.api_url}, identity {self.identity_url}")
            self._client = BitwardenClient(
                client_settings_from_dict(
                    {
                        "apiUrl": self.api_url,
                        "identityUrl": self.identity_url,
                        "deviceType": DeviceType.SDK,
                        "userAgent": USER_AGENT,
                    }
                )
            )
        return self._client

    def authenticate(self, access_token: str) -> Session:
        """
        Log in to Bitwarden with a machine account access token.

        Args:
            access_token: Machine account access token

        Returns:
            Session wrapping the logged-in SDK client

        Raises:
            AuthenticationFailed: If the SDK rejects the token or the call fails
        """
        try:
            response = self.client.auth().login_access_token(access_token)
        except Exception as e:
            raise AuthenticationFailed(str(e)) from e
        _raise_for_response(response, AuthenticationFailed)
        return Session(provider="bitwarden", client=self.client)

    def resolve(self, session: Session, identifiers: Set[uuid.UUID]) -> List[SecretRecord]:
        """
        Fetch secrets by id in a single request.

        Args:
            session: Session returned by authenticate
            identifiers: Secret UUIDs to fetch

        Returns:
            Resolved secret records

        Raises:
            ResolutionFailed: If any secret cannot be fetched
        """
        if not identifiers:
            return []

        try:
            response = session.client.secrets().get_by_ids(list(identifiers))
        except Exception as e:
            raise ResolutionFailed(str(e)) from e
        _raise_for_response(response, ResolutionFailed)

        if response is None or response.data is None:
            raise ResolutionFailed("empty response from Bitwarden")

        return [
            SecretRecord(id=uuid.UUID(str(secret.id)), value=secret.value)
            for secret in response.data.data
        ]
