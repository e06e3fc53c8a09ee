#!/usr/bin/env python3
"""Single-host container deployment tool: CLI entrypoint."""

import argparse

from dockhand.commands import register_deploy_command
from dockhand.logging_setup import setup_cli_logging


def main():
    parser = argparse.ArgumentParser(description="Deploy a git repository as a container behind nginx")
    subparsers = parser.add_subparsers(dest="command", required=True)

    register_deploy_command(subparsers)

    args = parser.parse_args()
    setup_cli_logging()
    args.func(args)


if __name__ == "__main__":
    main()
