# feature_switch/config.py
"""
Configuration loading for feature sets and stripping options.

Files are YAML (JSON is accepted too, being a subset). A feature file is
either a bare mapping of name -> value or has the mapping under a top-level
``features`` key:

    features:
      new-dashboard: true
      legacy-export: "false"

A strip options file may nest its mapping under ``strip``:

    strip:
      slash_comments:
        replace: "// removed: ${FEATURE}"
      html_attributes:
        enabled: false
"""
import logging
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from feature_switch.errors import config_invalid_error, config_not_found_error
from feature_switch.strip.options import invalid_dialects, merge_options

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _load_mapping(path: PathLike, section: str) -> Dict[str, Any]:
    """Load a YAML mapping, unwrapping the named top-level section if present."""
    config_path = Path(path)
    if not config_path.exists():
        raise config_not_found_error(str(config_path))

    try:
        with open(config_path, 'r') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise config_invalid_error(str(config_path), str(e)) from e

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise config_invalid_error(str(config_path), "top level must be a mapping")

    if section in data:
        data = data[section] or {}
        if not isinstance(data, dict):
            raise config_invalid_error(str(config_path), f"'{section}' must be a mapping")

    return data


def load_features(path: PathLike) -> Dict[str, Any]:
    """
    Load a raw feature set from a file.

    Values are returned as written; normalization to strict booleans is left
    to the FeatureStore (and its policy context).
    """
    features = _load_mapping(path, "features")
    logger.debug(f"Loaded {len(features)} features from {path}")
    return {str(name): value for name, value in features.items()}


def load_strip_options(path: PathLike) -> Dict[str, Dict[str, Any]]:
    """
    Load strip options from a file, merged onto the defaults.

    Each dialect entry must be a mapping, or a boolean toggling the dialect.
    """
    overrides = _load_mapping(path, "strip")

    invalid = invalid_dialects(overrides)
    if invalid:
        raise config_invalid_error(
            str(path),
            f"options for {', '.join(invalid)} must be a mapping or a boolean"
        )

    return merge_options(overrides)
