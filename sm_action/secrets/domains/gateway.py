"""Vault gateway interface.

A gateway is the only part of sm-action that talks to the network. The
pipeline depends on this protocol alone, so tests drive it with an
in-memory fake.
"""
import uuid
from typing import List, Protocol, Set

from .models import SecretRecord, Session


class VaultGateway(Protocol):
    """Authenticates to a vault and resolves secret identifiers."""

    display_name: str

    def authenticate(self, access_token: str) -> Session:
        """Log in with an access token. Raises AuthenticationFailed."""
        ...

    def resolve(self, session: Session, identifiers: Set[uuid.UUID]) -> List[SecretRecord]:
        """Fetch secrets by id. Raises ResolutionFailed."""
        ...
