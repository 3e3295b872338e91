from pathlib import Path
from typing import Any, Dict

import yaml

from .errors import ValidationError

# Engine defaults; a YAML file may override any of these keys.
DEFAULT_CONFIG: Dict[str, Any] = dict(
    required_number_of_overlapping_pixels=0,
    required_fraction_of_overlapping_pixels=0.0,
    backend="numpy",
    debug=False,
    verbose=False,
)


def load_config(path=None) -> Dict[str, Any]:
    """Defaults overlaid by the mapping in a YAML file (if given)."""
    cfg = dict(DEFAULT_CONFIG)
    if path is None:
        return cfg
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return cfg
    if not isinstance(data, dict):
        raise ValidationError(f"config {path} must contain a mapping, got {type(data).__name__}")
    unknown = sorted(set(data) - set(DEFAULT_CONFIG))
    if unknown:
        raise ValidationError(f"unknown config key(s) in {path}: {unknown}")
    cfg.update(data)
    return cfg
