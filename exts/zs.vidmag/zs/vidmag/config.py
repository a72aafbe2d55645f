"""
Filter configuration.

JSON config files are merged over DEFAULT_FILTER_CONFIG.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .core.evm_pipeline import MagnificationPipeline
from .core.filter_spec import FilterSpec

logger = logging.getLogger(__name__)


DEFAULT_FILTER_CONFIG = {
    # Temporal band-pass
    'low_freq': 0.8333,
    'high_freq': 1.0,
    'fps': 30.0,
    'num_taps': 31,
    # Amplification
    'alpha': 50.0,
    'chroma_attenuation': 1.0,
    # Spatial
    'pyramid_levels': 4,
}


def load_config(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Load filter configuration.

    Args:
        path: JSON file with any subset of DEFAULT_FILTER_CONFIG keys.
            None returns the defaults.

    Returns:
        Dictionary with configuration values

    Raises:
        ValueError: file is not a JSON object
    """
    config = dict(DEFAULT_FILTER_CONFIG)
    if path is None:
        return config

    path = Path(path)
    if not path.exists():
        logger.warning("Config file %s not found, using defaults", path)
        return config

    with open(path, encoding='utf-8') as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Malformed config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a JSON object")

    unknown = sorted(set(data) - set(DEFAULT_FILTER_CONFIG))
    if unknown:
        logger.warning("Ignoring unknown config keys in %s: %s", path, ", ".join(unknown))

    config.update({k: v for k, v in data.items() if k in DEFAULT_FILTER_CONFIG})
    return config


def spec_from_config(config: Dict[str, Any]) -> FilterSpec:
    """Build a FilterSpec from a loaded config."""
    return FilterSpec.from_dict(config)


def pipeline_from_config(config: Dict[str, Any]) -> MagnificationPipeline:
    """Build a MagnificationPipeline from a loaded config."""
    levels = config.get('pyramid_levels', DEFAULT_FILTER_CONFIG['pyramid_levels'])
    return MagnificationPipeline(spec_from_config(config), pyramid_levels=int(levels))
