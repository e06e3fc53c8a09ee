"""Interactive parameter collection.

Each parameter is read once, defaulted if possible, and validated. Any
failure raises ValueError: a bad answer ends the run instead of re-prompting.
"""

import logging
import os
import re
from collections.abc import Callable
from dataclasses import dataclass
from urllib.parse import quote

from dockhand.logging_setup import log_success
from dockhand.params.types import DeployParams
from dockhand.params.validate import validate_ip, validate_port, validate_url
from dockhand.redact import register_secret

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PromptField:
    """One prompted parameter."""

    name: str  # DeployParams attribute
    var: str  # name used in log and error messages
    label: str
    error: str
    validator: Callable[[str], bool] | None = None
    default: str = ""
    secret: bool = False


PROMPT_FIELDS = (
    PromptField(
        "repo_url", "GIT_REPO_URL", "Enter Git Repository URL",
        "Invalid Git URL format. Must start with http(s) or git.",
        validator=validate_url,
    ),
    PromptField(
        "pat", "PAT", "Enter Personal Access Token (PAT)",
        "PAT cannot be empty.",
        secret=True,
    ),
    PromptField(
        "branch", "BRANCH_NAME", "Enter branch name",
        "Branch name cannot be empty.",
        default="main",
    ),
    PromptField(
        "ssh_user", "SSH_USER", "Enter Remote Server SSH Username",
        "SSH Username cannot be empty.",
    ),
    PromptField(
        "server_ip", "SERVER_IP", "Enter Remote Server IP Address",
        "Invalid IP address format (e.g., 192.168.1.1).",
        validator=validate_ip,
    ),
    PromptField(
        "ssh_key_path", "SSH_KEY_PATH", "Enter Absolute Path to SSH Private Key (e.g., ~/.ssh/id_rsa)",
        "SSH Key Path cannot be empty and file must exist.",
    ),
    PromptField(
        "app_port", "APP_PORT", "Enter Application Internal Port",
        "Invalid port number (must be 1-65535).",
        validator=validate_port,
    ),
)


def format_prompt(field: PromptField) -> str:
    if field.default:
        return f"{field.label} (Default: {field.default}): "
    return f"{field.label}: "


def _read(read_fn, prompt):
    try:
        return read_fn(prompt)
    except EOFError:
        return ""


def resolve_value(field: PromptField, raw: str) -> str:
    """Apply the default, then validate *raw* for *field*.

    Returns the final value; raises ValueError on empty or invalid input
    and FileNotFoundError for a missing SSH key.
    """
    value = raw.strip()

    if not value and field.default:
        value = field.default
        logger.info(f"Using default for {field.var}: {value}")

    if not value:
        raise ValueError(f"Input is required for {field.var}.")

    if field.validator is not None and not field.validator(value):
        raise ValueError(field.error)

    if field.name == "ssh_key_path":
        value = os.path.expanduser(value)
        if not os.path.isfile(value):
            raise FileNotFoundError(f"SSH Private Key file not found or is not a file at '{value}'.")

    return value


def derive_app_name(repo_url: str) -> str:
    """Container/image name from the last path segment of the repository URL."""
    name = repo_url.rstrip("/").rsplit("/", 1)[-1]
    if name.endswith(".git"):
        name = name[: -len(".git")]
    name = re.sub(r"[^a-z0-9_.-]", "-", name.lower()).strip("-.")
    return name or "app"


def _optional_port(preset, key):
    raw = preset.get(key)
    if raw is None or raw == "":
        return None
    if not validate_port(raw):
        raise ValueError(f"Invalid {key} '{raw}' (must be 1-65535).")
    return int(raw)


def collect_parameters(preset=None, input_fn=input, secret_fn=None, dry_run=False) -> DeployParams:
    """Prompt for every parameter not already in *preset* and build DeployParams.

    Args:
        preset: mapping of DeployParams field name to string value (from a
            parameter file or the environment); these skip the prompt but are
            validated the same way
        input_fn: callable(prompt) -> str used for regular prompts
        secret_fn: callable(prompt) -> str used for the PAT (defaults to input_fn)
        dry_run: carried into the returned DeployParams
    """
    preset = preset or {}
    secret_fn = secret_fn or input_fn

    logger.info("--- Starting Parameter Collection ---")

    values = {}
    for field in PROMPT_FIELDS:
        if preset.get(field.name):
            logger.info(f"Using preset value for {field.var}")
            raw = preset[field.name]
        else:
            read_fn = secret_fn if field.secret else input_fn
            raw = _read(read_fn, format_prompt(field))
        values[field.name] = resolve_value(field, raw)
        if field.secret:
            register_secret(values[field.name])
            # URL-quoted form, as embedded in the clone URL
            register_secret(quote(values[field.name], safe=""))

    log_success(logger, "--- Parameter Collection Complete ---")

    app_name = preset.get("app_name")
    app_name = derive_app_name(app_name) if app_name else derive_app_name(values["repo_url"])

    return DeployParams(
        repo_url=values["repo_url"],
        pat=values["pat"],
        branch=values["branch"],
        ssh_user=values["ssh_user"],
        server_ip=values["server_ip"],
        ssh_key_path=values["ssh_key_path"],
        app_port=int(values["app_port"]),
        repo_dir=preset.get("repo_dir") or "deployed_repo",
        app_name=app_name,
        container_port=_optional_port(preset, "container_port"),
        ssh_port=_optional_port(preset, "ssh_port") or 22,
        dry_run=dry_run,
    )
