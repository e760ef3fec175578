"""Sectioned TOML layout for SpeedSettings.

SpeedSettings stays a flat model; on disk its fields are grouped into
[tiles], [routing], [http] and [logging] tables with short key names.
"""

from __future__ import annotations

from typing import Any

# {table: {flat_field: key_in_table}}
SECTION_MAP: dict[str, dict[str, str]] = {
    'tiles': {
        'tile_base_url': 'base_url',
        'strict_decode': 'strict_decode',
    },
    'routing': {
        'routing_host': 'host',
        'routing_api_key': 'api_key',
        'routing_costing': 'costing',
    },
    'http': {
        'http_timeout_s': 'timeout_s',
    },
    'logging': {
        'log_level': 'level',
    },
}

# Fields without a table of their own land here
COMMON_SECTION = 'common'

_FIELD_LOCATION: dict[str, tuple[str, str]] = {
    flat: (table, key)
    for table, fields in SECTION_MAP.items()
    for flat, key in fields.items()
}

_KEY_TO_FIELD: dict[str, dict[str, str]] = {
    table: {key: flat for flat, key in fields.items()}
    for table, fields in SECTION_MAP.items()
}


def flat_to_sectioned(flat: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """Group flat settings into TOML tables. None is skipped (TOML has no null)."""
    tables: dict[str, dict[str, Any]] = {}
    for name, value in flat.items():
        if value is None:
            continue
        table, key = _FIELD_LOCATION.get(name, (COMMON_SECTION, name))
        tables.setdefault(table, {})[key] = value
    return tables


def sectioned_to_flat(data: dict[str, Any]) -> dict[str, Any]:
    """Flatten parsed TOML back into SpeedSettings field names.

    Known tables have their short keys expanded; unknown tables and
    top-level scalars are passed through unchanged.
    """
    flat: dict[str, Any] = {}
    for name, value in data.items():
        if not isinstance(value, dict):
            flat[name] = value
            continue
        names = _KEY_TO_FIELD.get(name, {})
        flat.update({names.get(key, key): item for key, item in value.items()})
    return flat
