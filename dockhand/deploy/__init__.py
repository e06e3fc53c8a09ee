"""Deploy library: container deployment, nginx proxy, orchestration."""

from dockhand.deploy.container import (
    container_commands,
    deploy_container,
    package_build_context,
    wait_for_http,
)
from dockhand.deploy.nginx import configure_reverse_proxy, generate_nginx_conf
from dockhand.deploy.orchestrate import log_summary, resolve_container_port, run_deploy

__all__ = [
    "configure_reverse_proxy",
    "container_commands",
    "deploy_container",
    "generate_nginx_conf",
    "log_summary",
    "package_build_context",
    "resolve_container_port",
    "run_deploy",
    "wait_for_http",
]
