"""Remote server provisioning: connectivity check, packages, services."""

import logging

from dockhand.logging_setup import log_success
from dockhand.provisioning.ssh_transport import REMOTE_DEPLOY_DIR, make_run_cmd

logger = logging.getLogger(__name__)

SSH_CONNECT_TIMEOUT = 10

REQUIRED_PACKAGES = ("docker.io", "docker-compose", "nginx")


def provisioning_steps(ssh_user):
    """Ordered (description, command, error message) steps for a fresh host."""
    packages = " ".join(REQUIRED_PACKAGES)
    return [
        (
            f"Creating deploy directory {REMOTE_DEPLOY_DIR}...",
            f"mkdir -p {REMOTE_DEPLOY_DIR}",
            "Failed to create deploy directory on remote server.",
        ),
        (
            "Updating package lists on remote server...",
            "sudo apt update -y",
            "Failed to update package lists on remote server.",
        ),
        (
            "Installing required packages (Docker, Docker-Compose, Nginx) on remote server...",
            f"sudo DEBIAN_FRONTEND=noninteractive apt install -y {packages}",
            "Failed to install required packages on remote server.",
        ),
        (
            f"Adding user {ssh_user} to docker group on remote server...",
            f"sudo usermod -aG docker {ssh_user}",
            "Failed to add user to docker group.",
        ),
        (
            "Enabling and starting Docker service on remote server...",
            "sudo systemctl enable docker && sudo systemctl start docker",
            "Failed to enable/start Docker service on remote server.",
        ),
        (
            "Enabling and starting Nginx service on remote server...",
            "sudo systemctl enable nginx && sudo systemctl start nginx",
            "Failed to enable/start Nginx service on remote server.",
        ),
        (
            "Verifying Docker installation...",
            "docker --version",
            "Docker installation verification failed.",
        ),
        (
            "Verifying Docker-Compose installation...",
            "docker-compose --version",
            "Docker-Compose installation verification failed.",
        ),
        (
            "Verifying Nginx installation...",
            "nginx -v",
            "Nginx installation verification failed.",
        ),
    ]


async def check_ssh(server, ssh_key, ssh_port=22, dry_run=False):
    """One-shot SSH connectivity check with a short connect timeout."""
    logger.info(f"Attempting to SSH into remote server {server}...")
    run_cmd = make_run_cmd(
        server, ssh_key, ssh_port, workdir=None, dry_run=dry_run, connect_timeout=SSH_CONNECT_TIMEOUT
    )
    rc, _, _ = await run_cmd("echo 'SSH connection successful.'", timeout=60)
    if rc != 0:
        logger.error(f"SSH connection to {server} failed.")
        return False
    log_success(logger, f"SSH connection to {server} succeeded.")
    return True


async def provision_remote(server, ssh_key, ssh_port=22, ssh_user=None, dry_run=False, run_cmd=None):
    """Install and enable Docker, Docker-Compose and Nginx on the remote server.

    Steps run in order; the first failing command aborts provisioning.

    Returns:
        True if every step succeeded.
    """
    if run_cmd is None:
        run_cmd = make_run_cmd(server, ssh_key, ssh_port, workdir=None, dry_run=dry_run)
    ssh_user = ssh_user or server.split("@")[0]

    logger.info(f"Preparing remote environment on {server}...")
    for description, command, error in provisioning_steps(ssh_user):
        logger.info(description)
        rc, _, _ = await run_cmd(command, timeout=1800)
        if rc != 0:
            logger.error(error)
            return False

    log_success(logger, "Remote environment prepared successfully.")
    return True
