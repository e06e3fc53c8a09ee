"""Deploy orchestration: the full clone -> provision -> run -> proxy sequence."""

import logging

from dockhand.deploy.container import DEFAULT_CONTAINER_PORT, deploy_container
from dockhand.deploy.nginx import NGINX_LISTEN_PORT, configure_reverse_proxy
from dockhand.logging_setup import log_success
from dockhand.params.types import DeployParams
from dockhand.provisioning.remote import check_ssh, provision_remote
from dockhand.provisioning.ssh_transport import make_run_cmd, make_upload_file
from dockhand.source.repository import check_build_files, clone_or_update, detect_exposed_port, find_build_files

logger = logging.getLogger(__name__)


def log_summary(params: DeployParams):
    """Log the collected configuration with the PAT hidden."""
    logger.info("Deployment Configuration Summary:")
    logger.info("---------------------------------")
    logger.info(f"Git Repository URL: {params.repo_url}")
    logger.info(f"Git Branch:         {params.branch}")
    logger.info("PAT:                *********** (Hidden)")
    logger.info(f"SSH User:           {params.ssh_user}")
    logger.info(f"Server IP:          {params.server_ip}")
    logger.info(f"SSH Key Path:       {params.ssh_key_path}")
    logger.info(f"App Internal Port:  {params.app_port}")
    logger.info(f"Application Name:   {params.app_name}")
    logger.info("---------------------------------")


def resolve_container_port(params: DeployParams):
    """Explicit port, else the Dockerfile's EXPOSE, else 80."""
    if params.container_port is not None:
        return params.container_port
    exposed = detect_exposed_port(params.repo_dir)
    if exposed is not None:
        logger.info(f"Using container port {exposed} from Dockerfile EXPOSE")
        return exposed
    return DEFAULT_CONTAINER_PORT


async def run_deploy(params: DeployParams, probe_timeout=60) -> bool:
    """Run every deployment step in order, stopping at the first failure.

    Returns:
        True if the application was deployed and the proxy configured.
    """
    if params.app_port == NGINX_LISTEN_PORT:
        logger.error(f"App port {params.app_port} conflicts with the Nginx listen port; choose another port.")
        return False

    log_summary(params)

    logger.info("--- Step 1: Local Git Operations ---")
    ok = await clone_or_update(params.repo_url, params.pat, params.branch, params.repo_dir, dry_run=params.dry_run)
    if not ok:
        return False

    logger.info(f"Checking build files in repository directory: {params.repo_dir}")
    if not check_build_files(params.repo_dir, dry_run=params.dry_run):
        return False
    build_files = find_build_files(params.repo_dir)
    use_compose = "docker-compose.yml" in build_files and "Dockerfile" not in build_files
    container_port = resolve_container_port(params)

    logger.info("--- Step 2: Remote Server Preparation ---")
    if not await check_ssh(params.address, params.ssh_key_path, params.ssh_port, dry_run=params.dry_run):
        return False

    login_cmd = make_run_cmd(params.address, params.ssh_key_path, params.ssh_port, workdir=None, dry_run=params.dry_run)
    ok = await provision_remote(
        params.address,
        params.ssh_key_path,
        params.ssh_port,
        ssh_user=params.ssh_user,
        run_cmd=login_cmd,
    )
    if not ok:
        return False

    logger.info("--- Step 3: Application Deployment ---")
    run_cmd = make_run_cmd(params.address, params.ssh_key_path, params.ssh_port, dry_run=params.dry_run)
    upload_file = make_upload_file(params.address, params.ssh_key_path, params.ssh_port, dry_run=params.dry_run)
    ok = await deploy_container(
        params,
        run_cmd,
        upload_file,
        container_port,
        use_compose=use_compose,
        probe_timeout=probe_timeout,
    )
    if not ok:
        return False

    logger.info("--- Step 4: Reverse Proxy ---")
    if not await configure_reverse_proxy(login_cmd, params.server_ip, params.app_port):
        return False

    status = "dry-run (not deployed)" if params.dry_run else "deployed"
    logger.info(f"Endpoint: http://{params.server_ip}/")
    logger.info(f"Status: {status}")
    log_success(logger, "Deployment finished successfully.")
    return True
