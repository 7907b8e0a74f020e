"""Shared fixtures for the sm-action test suite."""
import uuid
from typing import Dict, List, Optional, Set

import pytest

from sm_action.secrets.domains.errors import AuthenticationFailed, ResolutionFailed
from sm_action.secrets.domains.models import SecretRecord, Session

UUID_ONE = uuid.UUID("91ba3f10-a9a2-4795-bacf-0eee2d39a074")
UUID_TWO = uuid.UUID("bfd7aa33-54f2-487b-bbbf-4a69b49fdc0d")


class FakeGateway:
    """In-memory vault gateway that records every call."""

    display_name = "Fake Vault"

    def __init__(
        self,
        secrets: Optional[Dict[uuid.UUID, str]] = None,
        token: str = "valid-token",
        extra: Optional[List[SecretRecord]] = None,
        fail_resolve: bool = False,
    ):
        self.secrets = secrets or {}
        self.token = token
        self.extra = extra or []
        self.fail_resolve = fail_resolve
        self.calls = []

    def authenticate(self, access_token: str) -> Session:
        self.calls.append(("authenticate", access_token))
        if access_token != self.token:
            raise AuthenticationFailed("invalid access token")
        return Session(provider="fake", client=self)

    def resolve(self, session: Session, identifiers: Set[uuid.UUID]) -> List[SecretRecord]:
        self.calls.append(("resolve", set(identifiers)))
        if self.fail_resolve:
            raise ResolutionFailed("404 Not Found")
        records = [
            SecretRecord(id=secret_id, value=self.secrets[secret_id])
            for secret_id in identifiers
            if secret_id in self.secrets
        ]
        return records + self.extra


@pytest.fixture
def fake_gateway():
    """Gateway holding two secrets, one of them multi-line."""
    return FakeGateway(
        secrets={
            UUID_ONE: "value-one",
            UUID_TWO: "line one\nline two=with equals",
        }
    )


@pytest.fixture
def env_file_path(tmp_path, monkeypatch):
    """Point GITHUB_ENV at a fresh temporary file."""
    path = tmp_path / f"github_env_test_{uuid.uuid4()}"
    monkeypatch.setenv("GITHUB_ENV", str(path))
    return path
