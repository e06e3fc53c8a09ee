"""Deploy parameters: types, validation, prompting, parameter files."""

from dockhand.params.config import load_param_file, preset_from_env
from dockhand.params.prompt import PROMPT_FIELDS, collect_parameters, derive_app_name
from dockhand.params.types import DeployParams
from dockhand.params.validate import validate_ip, validate_port, validate_url

__all__ = [
    "DeployParams",
    "PROMPT_FIELDS",
    "collect_parameters",
    "derive_app_name",
    "load_param_file",
    "preset_from_env",
    "validate_ip",
    "validate_port",
    "validate_url",
]
