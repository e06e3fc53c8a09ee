"""Deploy command: collect parameters interactively, then run the deployment."""

import asyncio
import getpass
import logging
import sys

from dockhand.deploy.orchestrate import run_deploy
from dockhand.logging_setup import default_log_path, log_success, setup_cli_logging
from dockhand.params import collect_parameters, load_param_file, preset_from_env

logger = logging.getLogger(__name__)

BANNER = "=" * 53


def _build_preset(args):
    preset = load_param_file(args.config) if args.config else {}
    if args.repo_dir:
        preset["repo_dir"] = args.repo_dir
    if args.container_port is not None:
        preset["container_port"] = str(args.container_port)
    return preset_from_env(preset)


def handle_deploy(args):
    """Handle the deploy command."""
    log_file = setup_cli_logging(default_log_path(args.log_dir))

    print(BANNER)
    print("Deployment Script Initialized".center(len(BANNER)))
    print(BANNER)
    logger.info(f"All logs are being recorded in: {log_file}")

    # Hide the PAT while typing only when a terminal is attached
    secret_fn = getpass.getpass if sys.stdin.isatty() else input

    try:
        preset = _build_preset(args)
        params = collect_parameters(preset, input_fn=input, secret_fn=secret_fn, dry_run=args.dry_run)
    except (ValueError, FileNotFoundError) as e:
        logger.error(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        logger.error("Aborted by user.")
        sys.exit(1)

    try:
        success = asyncio.run(run_deploy(params, probe_timeout=args.probe_timeout))
    except KeyboardInterrupt:
        logger.error("Aborted by user.")
        sys.exit(1)

    if not success:
        logger.error("Deployment failed.")
        sys.exit(1)

    log_success(logger, f"Deployment log saved to {log_file}")


def register_deploy_command(subparsers):
    """Register the deploy subcommand."""
    parser = subparsers.add_parser(
        "deploy",
        help="Clone a repository and deploy it as a container behind nginx on a remote server",
    )
    parser.add_argument("--config", default=None, help="YAML file pre-filling deploy parameters")
    parser.add_argument("--repo-dir", default=None, help="Local checkout directory (default: deployed_repo)")
    parser.add_argument("--log-dir", default=".", help="Directory for the deployment log (default: .)")
    parser.add_argument(
        "--container-port",
        type=int,
        default=None,
        help="Port the app listens on inside the container (default: Dockerfile EXPOSE, else 80)",
    )
    parser.add_argument(
        "--probe-timeout",
        type=int,
        default=60,
        help="Seconds to wait for the app to answer HTTP (default: 60)",
    )
    parser.add_argument("--dry-run", action="store_true", help="Print commands without executing")
    parser.set_defaults(func=handle_deploy)
