"""Join resolved secrets against the identifier map."""
import uuid
from typing import Dict, Iterable

from .models import SecretRecord


def prepare_secret_env_vars(
    secrets_data: Iterable[SecretRecord],
    id_to_name_map: Dict[uuid.UUID, str],
) -> Dict[str, str]:
    """
    Convert resolved secrets into environment variables.

    Args:
        secrets_data: Records returned by the vault gateway
        id_to_name_map: Identifier map from parse_secret_input

    Returns:
        Dict from desired name to secret value

    Behavior:
        - Records whose id was not requested are dropped without a warning
        - Output follows identifier map order (input line order), so when two
          identifiers share a name the one given later in the input wins,
          regardless of the order the gateway returned records in
        - A record repeated by the gateway resolves to its last value
    """
    values_by_id: Dict[uuid.UUID, str] = {}
    for secret in secrets_data:
        if secret.id in id_to_name_map:
            values_by_id[secret.id] = secret.value

    secret_envs: Dict[str, str] = {}
    for secret_id, name in id_to_name_map.items():
        if secret_id in values_by_id:
            secret_envs[name] = values_by_id[secret_id]
    return secret_envs
