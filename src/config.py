"""Unified configuration loaded from .randpick.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field

from randpick.content.models import SortDirection, SortKey
from randpick.content.storage import JsonFileStorage
from randpick.content.store import STORAGE_KEY, ContentStore

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".randpick.toml"
GLOBAL_CONFIG_PATH = Path.home() / ".config" / "randpick" / "config.toml"
DEFAULT_STORAGE_PATH = "~/.local/share/randpick/storage.json"


class StorageConfig(BaseModel):
    """[storage] section."""

    path: str = DEFAULT_STORAGE_PATH
    key: str = STORAGE_KEY


class PersistenceConfig(BaseModel):
    """[persistence] section."""

    strict: bool = False


class DisplayConfig(BaseModel):
    """[display] section."""

    label_format: str = ""


class SamplerConfig(BaseModel):
    """[sampler] section."""

    seed: int | None = None
    default_count: int = Field(default=1, ge=1)


class QueryConfig(BaseModel):
    """[query] section: default ordering for list and pick."""

    sort_key: SortKey = SortKey.CREATED
    direction: SortDirection = SortDirection.DESC


class RandpickConfig(BaseModel):
    """Top-level configuration model."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    persistence: PersistenceConfig = Field(default_factory=PersistenceConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    sampler: SamplerConfig = Field(default_factory=SamplerConfig)
    query: QueryConfig = Field(default_factory=QueryConfig)

    def build_store(self) -> ContentStore:
        """Create and initialize a ContentStore backed by the storage file."""
        store = ContentStore(
            JsonFileStorage(Path(self.storage.path)),
            key=self.storage.key,
            strict=self.persistence.strict,
            label_format=self.display.label_format,
        )
        store.initialize()
        return store


def load_config(path: str | Path | None = None) -> RandpickConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .randpick.toml in CWD
    3. ~/.config/randpick/config.toml

    Then overlay environment variables.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for candidate in (Path(".") / CONFIG_FILENAME, GLOBAL_CONFIG_PATH):
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break

    config = RandpickConfig.model_validate(data) if data else RandpickConfig()
    return _apply_env_vars(config)


def merge_cli_overrides(config: RandpickConfig, **cli_kwargs: object) -> RandpickConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only values that are not None override the config.
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "storage_path": ("storage", "path"),
        "storage_key": ("storage", "key"),
        "strict": ("persistence", "strict"),
        "seed": ("sampler", "seed"),
        "label_format": ("display", "label_format"),
    }

    for key, value in cli_kwargs.items():
        if value is None or key not in mapping:
            continue
        section, field = mapping[key]
        data[section][field] = value

    return RandpickConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: RandpickConfig) -> RandpickConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "RANDPICK_STORAGE_PATH": ("storage", "path"),
        "RANDPICK_STORAGE_KEY": ("storage", "key"),
        "RANDPICK_LABEL_FORMAT": ("display", "label_format"),
    }

    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    strict_raw = os.environ.get("RANDPICK_STRICT")
    if strict_raw is not None:
        data["persistence"]["strict"] = strict_raw.lower() in ("true", "1", "yes")

    seed_raw = os.environ.get("RANDPICK_SEED")
    if seed_raw:
        try:
            data["sampler"]["seed"] = int(seed_raw)
        except ValueError:
            logger.warning("Ignoring non-integer RANDPICK_SEED=%r", seed_raw)

    return RandpickConfig.model_validate(data)
