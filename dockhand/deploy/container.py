"""Container deployment: ship the build context, build and run, verify."""

import asyncio
import logging
import os
import tarfile
import tempfile

import httpx

from dockhand.logging_setup import log_success

logger = logging.getLogger(__name__)

CONTEXT_ARCHIVE = "build_context.tar.gz"
DEFAULT_CONTAINER_PORT = 80


def _exclude_git(tarinfo):
    if ".git" in tarinfo.name.split("/"):
        return None
    return tarinfo


def package_build_context(repo_dir, dest_path):
    """Write a gzipped tarball of *repo_dir* (without .git) to *dest_path*."""
    with tarfile.open(dest_path, "w:gz") as tar:
        tar.add(repo_dir, arcname=".", filter=_exclude_git)
    return dest_path


def container_commands(app_name, image_name, app_port, container_port, use_compose=False):
    """Commands that (re)start the application, in order.

    Returns:
        list of (description, command, error message) tuples
    """
    if use_compose:
        return [
            (
                "Starting services with docker-compose...",
                "docker-compose up -d --build",
                "Failed to deploy application using docker-compose on remote server.",
            ),
        ]
    return [
        (
            f"Removing previous container {app_name} (if any)...",
            f"docker rm -f {app_name} >/dev/null 2>&1 || true",
            f"Failed to remove previous container {app_name}.",
        ),
        (
            f"Building Docker image {image_name}...",
            f"docker build -t {image_name} .",
            "Failed to build Docker image on remote server.",
        ),
        (
            f"Running container {app_name} ({app_port} -> {container_port})...",
            f"docker run -d --name {app_name} --restart unless-stopped -p {app_port}:{container_port} {image_name}",
            "Failed to run Docker container on remote server.",
        ),
    ]


async def wait_for_http(url, timeout=60, interval=5, dry_run=False, transport=None):
    """Poll *url* with HEAD requests until any HTTP response arrives.

    Any status code counts as reachable; only transport errors are retried.
    *transport* is passed to httpx.AsyncClient (tests use httpx.MockTransport).
    """
    if dry_run:
        logger.info(f"[dry-run] HEAD {url}")
        return True

    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    last_error = None
    async with httpx.AsyncClient(timeout=10, follow_redirects=False, transport=transport) as client:
        while True:
            try:
                resp = await client.head(url)
            except httpx.TransportError as e:
                last_error = e
            else:
                logger.info(f"HTTP {resp.status_code} {resp.reason_phrase} from {url}")
                return True
            if loop.time() + interval > deadline:
                break
            await asyncio.sleep(interval)

    logger.error(f"Failed to access the deployed application at {url}: {last_error}")
    return False


async def _ship_build_context(repo_dir, run_cmd, upload_file, dry_run):
    logger.info("Copying build context to remote server...")
    if dry_run:
        logger.info(f"[dry-run] package {repo_dir} -> {CONTEXT_ARCHIVE}")
        if not await upload_file(CONTEXT_ARCHIVE, CONTEXT_ARCHIVE):
            return False
    else:
        with tempfile.TemporaryDirectory() as tmp_dir:
            archive = package_build_context(repo_dir, os.path.join(tmp_dir, CONTEXT_ARCHIVE))
            if not await upload_file(archive, CONTEXT_ARCHIVE):
                return False

    rc, _, _ = await run_cmd(f"tar -xzf {CONTEXT_ARCHIVE} && rm -f {CONTEXT_ARCHIVE}", timeout=300)
    if rc != 0:
        logger.error("Failed to unpack build context on remote server.")
        return False
    return True


async def deploy_container(params, run_cmd, upload_file, container_port, use_compose=False, probe_timeout=60):
    """Ship the checkout, (re)start the application and check it responds.

    Args:
        params: DeployParams
        run_cmd: async remote command runner working in the deploy directory
        upload_file: async callable(local_path, name) -> bool
        container_port: port the application listens on inside the container
        use_compose: start with docker-compose instead of docker build/run
        probe_timeout: seconds to wait for the application to answer HTTP
    """
    logger.info("Deploying Dockerized application on remote server...")

    if not await _ship_build_context(params.repo_dir, run_cmd, upload_file, params.dry_run):
        return False

    commands = container_commands(params.app_name, params.image_name, params.app_port, container_port, use_compose)
    for description, command, error in commands:
        logger.info(description)
        rc, _, _ = await run_cmd(command, timeout=1800)
        if rc != 0:
            logger.error(error)
            return False

    logger.info("Validating deployment on remote server...")
    rc, _, _ = await run_cmd("docker ps", timeout=60)
    if rc != 0:
        logger.error("Failed to verify running Docker containers on remote server.")
        return False

    logger.info("Checking Docker container logs on remote server...")
    logs_cmd = "docker-compose logs --tail=50" if use_compose else f"docker logs --tail 50 {params.app_name}"
    rc, _, _ = await run_cmd(logs_cmd, timeout=60)
    if rc != 0:
        logger.error("Failed to retrieve Docker container logs on remote server.")
        return False

    url = f"http://{params.server_ip}:{params.app_port}"
    logger.info(f"Checking application accessibility at {url}...")
    if not await wait_for_http(url, timeout=probe_timeout, dry_run=params.dry_run):
        return False

    log_success(logger, "Dockerized application deployed successfully.")
    return True
