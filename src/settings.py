import logging
from pathlib import Path

import tomlkit

from domain.models import SpeedSettings
from domain.toml_sections import flat_to_sectioned, sectioned_to_flat

logger = logging.getLogger(__name__)


def load_settings(path: str | Path | None = None) -> SpeedSettings:
    """
    Load and validate a TOML settings file into SpeedSettings.

    Without a path the built-in defaults are returned. Sectioned files
    ([tiles], [routing], [http], [logging]) and flat files are both accepted.
    """
    if path is None:
        return SpeedSettings()
    p = Path(path)
    if not p.exists():
        msg = f'Settings file not found: {p}'
        raise FileNotFoundError(msg)
    text = p.read_text(encoding='utf-8')
    data = tomlkit.parse(text).unwrap()
    settings = SpeedSettings.model_validate(sectioned_to_flat(data))
    logger.info(
        'Settings loaded from %s: tiles=%s routing=%s strict_decode=%s',
        p,
        settings.tile_base_url,
        settings.routing_host,
        settings.strict_decode,
    )
    return settings


def save_settings(path: str | Path, settings: SpeedSettings) -> Path:
    """Write settings as sectioned TOML (no atomic replace, no backup)."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    data = flat_to_sectioned(settings.model_dump())
    p.write_text(tomlkit.dumps(data), encoding='utf-8')
    return p
