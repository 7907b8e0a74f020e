"""Parsing of the ``UUID > Name`` secrets input."""
import logging
import re
import uuid
from typing import Dict, Iterable, Tuple

from .errors import MalformedIdentifier

logger = logging.getLogger(__name__)

_HEX = "[0-9a-fA-F]"
_HYPHENATED = _HEX + "{8}-" + _HEX + "{4}-" + _HEX + "{4}-" + _HEX + "{4}-" + _HEX + "{12}"

# hyphenated, simple, braced and urn forms; uuid.UUID alone strips stray
# braces, hyphens and prefixes anywhere in the text
UUID_PATTERN = re.compile(
    "|".join([
        _HYPHENATED,
        _HEX + "{32}",
        r"\{" + _HYPHENATED + r"\}",
        "urn:uuid:" + _HYPHENATED,
    ])
)


def parse_secret_line(line: str) -> Tuple[uuid.UUID, str]:
    """
    Parse a single ``UUID > Name`` line.

    Args:
        line: Raw input line

    Returns:
        Tuple of (identifier, desired name). The name is empty when the
        line has no ``>`` or nothing after it.

    Raises:
        MalformedIdentifier: If the text before the first ``>`` is not a UUID
    """
    uuid_part, _, name_part = line.partition(">")
    uuid_part = uuid_part.strip()
    if not UUID_PATTERN.fullmatch(uuid_part):
        raise MalformedIdentifier(uuid_part)
    try:
        secret_id = uuid.UUID(uuid_part)
    except ValueError:
        raise MalformedIdentifier(uuid_part) from None
    return secret_id, name_part.strip()


def parse_secret_input(secret_lines: Iterable[str]) -> Dict[uuid.UUID, str]:
    """
    Build the identifier map from the secrets input.

    Args:
        secret_lines: Ordered ``UUID > Name`` lines

    Returns:
        Dict from secret UUID to desired environment variable name, in input
        order. A repeated UUID keeps its first position but takes the last name.

    Raises:
        MalformedIdentifier: On the first line with an invalid UUID. No
            partial map is returned.

    Behavior:
        - Duplicate UUIDs are not an error; the later name wins and a
          warning is logged with both names
        - Names are not validated as environment variable names
    """
    id_to_name_map: Dict[uuid.UUID, str] = {}

    for line in secret_lines:
        logger.debug(f"Parsing line: {line}")
        secret_id, desired_name = parse_secret_line(line)

        if secret_id in id_to_name_map:
            logger.warning(
                f"Warning: Duplicate UUID found: {secret_id}. "
                f"Old value: {id_to_name_map[secret_id]}, New value: {desired_name}"
            )
        id_to_name_map[secret_id] = desired_name

    return id_to_name_map
