"""CLI subcommands."""

from dockhand.commands.deploy import register_deploy_command

__all__ = ["register_deploy_command"]
