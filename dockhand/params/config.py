"""Parameter file loading: pre-fill deploy parameters from YAML."""

import os
from dataclasses import fields

import yaml

from dockhand.params.types import DeployParams

PAT_ENV_VAR = "DOCKHAND_PAT"

# dry_run is a CLI concern, not something a parameter file should switch on
_ALLOWED_KEYS = {f.name for f in fields(DeployParams)} - {"dry_run"}


def load_param_file(path):
    """Load a YAML mapping of DeployParams field names to values.

    Values are returned as strings (except None) so they go through the
    same validators as typed input.
    """
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Parameter file not found: {path}")

    with open(path) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in parameter file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Parameter file {path} must contain a mapping, got {type(data).__name__}")

    unknown = sorted(set(data) - _ALLOWED_KEYS)
    if unknown:
        allowed = ", ".join(sorted(_ALLOWED_KEYS))
        raise ValueError(f"Unknown parameter(s) in {path}: {', '.join(unknown)}. Allowed: {allowed}")

    return {k: str(v) for k, v in data.items() if v is not None}


def preset_from_env(preset=None):
    """Fill the PAT from $DOCKHAND_PAT when the preset does not carry one."""
    preset = dict(preset or {})
    if not preset.get("pat"):
        env_pat = os.environ.get(PAT_ENV_VAR, "")
        if env_pat:
            preset["pat"] = env_pat
    return preset
