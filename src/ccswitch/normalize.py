# Normalization repair for MCP server maps
import logging
from typing import Any

logger = logging.getLogger(__name__)


def normalize_server_keys(servers: dict[str, Any]) -> int:
    """Make every entry's internal id match its map key, in place.

    ABOUTME: Missing, non-string or blank id -> the key; padded id -> trimmed
    ABOUTME: An id that differs from its key renames the slot, unless that name is taken,
    ABOUTME: in which case the key wins and the id is forced back to it
    ABOUTME: Running it twice in a row reports 0 changes the second time

    Args:
        servers: Server entries keyed by id (mutated in place)

    Returns:
        Number of fixes applied; non-zero means the map should be persisted

    Examples:
        >>> servers = {"a": {"id": " b "}, "c": {}}
        >>> normalize_server_keys(servers)
        3
        >>> sorted(servers)
        ['b', 'c']
    """
    change_count = 0
    renames: list[tuple[str, str]] = []

    for key, entry in servers.items():
        if not isinstance(entry, dict):
            continue

        raw_id = entry.get("id")
        if isinstance(raw_id, str) and raw_id.strip():
            target_id = raw_id.strip()
            if target_id != raw_id:
                entry["id"] = target_id
                change_count += 1
        else:
            entry["id"] = key
            target_id = key
            change_count += 1

        if target_id != key:
            renames.append((key, target_id))

    for old_key, new_key in renames:
        if new_key in servers:
            logger.warning(
                f"MCP entry '{old_key}' has internal id '{new_key}' that collides with an existing key, "
                f"keeping '{old_key}'"
            )
            entry = servers[old_key]
            if entry.get("id") != old_key:
                entry["id"] = old_key
                change_count += 1
            continue

        entry = servers.pop(old_key)
        entry["id"] = new_key
        servers[new_key] = entry
        logger.info(f"Repaired MCP entry key: '{old_key}' -> '{new_key}'")
        change_count += 1

    return change_count
