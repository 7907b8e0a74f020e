"""GCP Secret Manager gateway.

Secrets are looked up by id inside one project, so each requested UUID must
be the secret id of a GCP secret: ``projects/<project>/secrets/<uuid>``.
"""
import logging
import os
import uuid
from typing import List, Optional, Set

from google.api_core import exceptions as google_exceptions
from google.cloud import secretmanager
from google.oauth2.credentials import Credentials

from .errors import AuthenticationFailed, ResolutionFailed
from .models import SecretRecord, Session

logger = logging.getLogger(__name__)


class GCPSecretGateway:
    """Wrapper around GCP Secret Manager client."""

    display_name = "GCP Secret Manager"

    def __init__(self, project_id: Optional[str] = None):
        self.project_id = project_id

    def get_project_id(self) -> str:
        """
        Get GCP project ID from config or environment variable.

        Priority order:
        1. project_id passed in (gcp_project input)
        2. GCP_PROJECT environment variable

        Raises:
            ResolutionFailed: If no project ID is configured
        """
        if self.project_id:
            return self.project_id

        gcp_project_env = os.getenv("GCP_PROJECT")
        if gcp_project_env:
            logger.debug(f"Using GCP_PROJECT from environment: {gcp_project_env}")
            return gcp_project_env

        raise ResolutionFailed(
            "Project ID not found. Set the gcp_project input or the GCP_PROJECT environment variable"
        )

    def authenticate(self, access_token: str) -> Session:
        """
        Build a Secret Manager client from an OAuth2 access token.

        No request is made here; GCP validates the token on first access,
        and resolve reports a rejected token as AuthenticationFailed.
        """
        if not access_token:
            raise AuthenticationFailed("access token is empty", provider=self.display_name)
        try:
            client = secretmanager.SecretManagerServiceClient(
                credentials=Credentials(token=access_token)
            )
        except Exception as e:
            raise AuthenticationFailed(str(e), provider=self.display_name) from e
        return Session(provider="gcp", client=client)

    def resolve(self, session: Session, identifiers: Set[uuid.UUID]) -> List[SecretRecord]:
        """
        Fetch the latest version of each secret.

        Raises:
            AuthenticationFailed: If GCP rejects the access token
            ResolutionFailed: If any secret cannot be read
        """
        if not identifiers:
            return []

        project_id = self.get_project_id()
        records = []
        for secret_id in sorted(identifiers):
            name = f"projects/{project_id}/secrets/{secret_id}/versions/latest"
            try:
                response = session.client.access_secret_version(request={"name": name})
            except google_exceptions.Unauthenticated as e:
                raise AuthenticationFailed(str(e), provider=self.display_name) from e
            except google_exceptions.GoogleAPICallError as e:
                raise ResolutionFailed(f"{secret_id}: {e}") from e
            records.append(
                SecretRecord(id=secret_id, value=response.payload.data.decode("UTF-8"))
            )
        return records
