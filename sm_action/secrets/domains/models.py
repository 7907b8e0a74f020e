"""Domain models for secret injection."""
import uuid
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class SecretRecord:
    """A resolved secret as returned by a vault gateway."""
    id: uuid.UUID
    value: str

    def __repr__(self) -> str:
        return f"SecretRecord(id={self.id!s}, value=<redacted>)"


@dataclass
class Session:
    """An authenticated handle on a vault, opaque to everything but its gateway."""
    provider: str
    client: Any
