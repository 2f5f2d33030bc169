from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional

from ssot_browser.config.model import RESOURCE_TYPES, GlobalConfig, ResourceConfig
from ssot_browser.core.exceptions import ConfigError

logger = logging.getLogger(__name__)


def _resolve_dir(root: Path, raw: Optional[str]) -> Optional[Path]:
    # Absolute paths are used as-is; relative ones are resolved against the config root.
    if raw is None:
        return None
    p = Path(raw)
    return p if p.is_absolute() else (root / p).resolve()


def _read_json(path: Path) -> dict:
    try:
        with path.open() as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e


def load_global_config(root: Path) -> GlobalConfig:
    """
    Load configuration from a directory using the multi-file layout.

    Expected structure:

        root/
            global.json
            resources/
                targeting.json
                campaign.json
                ...

    Each file in 'resources/' is parsed into a ResourceConfig (facets and edit
    scopes included). Scopes and facets are built eagerly so that a broken
    file fails at startup instead of on first click.

    :param root: Directory containing 'global.json' and optionally 'resources/'.
    :return: A GlobalConfig instance.
    :raises FileNotFoundError: if global.json does not exist.
    :raises ConfigError: on malformed or duplicate resource definitions.
    """
    root = Path(root)
    logger.info("Loading global config", extra={"config_root": str(root)})

    global_path = root / "global.json"
    if not global_path.is_file():
        raise FileNotFoundError(f"File not found at {global_path}")

    raw_global = _read_json(global_path)

    resources: List[ResourceConfig] = []
    resources_dir = root / "resources"
    if resources_dir.is_dir():
        for idx, config_file in enumerate(sorted(resources_dir.glob("*.json"))):
            cfg = ResourceConfig.from_raw(_read_json(config_file), source_path=config_file, index=idx)
            if cfg.key not in RESOURCE_TYPES:
                raise ConfigError(
                    f"Unknown resource type '{cfg.key}' in {config_file}; "
                    f"expected one of {', '.join(RESOURCE_TYPES)}"
                )
            if any(r.key == cfg.key for r in resources):
                raise ConfigError(f"Duplicate resource key '{cfg.key}' in {config_file}")
            # Force parsing so errors surface here
            cfg.facets
            cfg.edit_scopes
            resources.append(cfg)

    resources.sort(key=lambda r: RESOURCE_TYPES.index(r.key))

    data_source = raw_global.get("data_source", "http")
    if data_source not in ("http", "demo"):
        raise ConfigError(f"data_source must be 'http' or 'demo', got {data_source!r}")

    global_cfg = GlobalConfig(
        ui_title=raw_global.get("ui_title", "Single Source Of Truth"),
        subtitle=raw_global.get("subtitle", "Marketing operations data"),
        base_url=raw_global.get("base_url", "http://localhost:3000/api").rstrip("/"),
        timeout_seconds=float(raw_global.get("timeout_seconds", 30.0)),
        data_source=data_source,
        demo_data_dir=_resolve_dir(root, raw_global.get("demo_data_dir")),
        cache_dir=_resolve_dir(root, raw_global.get("cache_dir")),
        default_table=raw_global.get("default_table"),
        resources=resources,
    )

    logger.info(
        "Resources loaded from config root",
        extra={
            "config_root": str(root),
            "n_resources": len(resources),
            "resources": [r.key for r in resources],
        },
    )
    return global_cfg
