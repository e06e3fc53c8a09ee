"""Local git checkout: clone or update the application repository."""

import logging
import os
import re
from urllib.parse import quote, urlsplit, urlunsplit

from dockhand.logging_setup import log_success
from dockhand.provisioning.shell import run_shell_cmd

logger = logging.getLogger(__name__)

BUILD_FILES = ("Dockerfile", "docker-compose.yml")

_EXPOSE_RE = re.compile(r"^\s*EXPOSE\s+(\d+)", re.IGNORECASE | re.MULTILINE)


def authenticated_url(repo_url, pat):
    """Embed *pat* as the userinfo of an http(s) repository URL.

    ``git://`` URLs carry no credentials and are returned unchanged, as is
    any URL when *pat* is empty. Existing userinfo is replaced.
    """
    parts = urlsplit(repo_url)
    if not pat or parts.scheme not in ("http", "https"):
        return repo_url
    host = parts.netloc.rsplit("@", 1)[-1]
    return urlunsplit(parts._replace(netloc=f"{quote(pat, safe='')}@{host}"))


async def clone_or_update(repo_url, pat, branch, repo_dir, dry_run=False, run=run_shell_cmd):
    """Clone *repo_url* into *repo_dir*, or checkout + pull when already cloned.

    Returns:
        True on success.
    """
    logger.info(f"Preparing deployment directory: {repo_dir}")

    if os.path.isdir(os.path.join(repo_dir, ".git")):
        logger.info(f"Repository directory '{repo_dir}' already exists. Performing git pull...")

        logger.info(f"Checking out branch {branch}...")
        rc, _, _ = await run(["git", "-C", repo_dir, "checkout", branch], dry_run=dry_run, timeout=120, log_output=True)
        if rc != 0:
            logger.error(f"Failed to checkout branch {branch}.")
            return False

        logger.info("Pulling latest changes...")
        rc, _, _ = await run(["git", "-C", repo_dir, "pull", "origin", branch], dry_run=dry_run, timeout=600, log_output=True)
        if rc != 0:
            logger.error(f"Failed to pull latest changes for branch {branch}.")
            return False

        log_success(logger, "Repository successfully updated via git pull.")
        return True

    logger.info(f"Repository directory '{repo_dir}' does not exist. Performing git clone...")
    command = ["git", "clone", "--branch", branch, authenticated_url(repo_url, pat), repo_dir]
    rc, _, _ = await run(command, dry_run=dry_run, timeout=1800, log_output=True)
    if rc != 0:
        logger.error(f"Failed to clone repository {repo_url}.")
        return False

    log_success(logger, f"Repository successfully cloned into {repo_dir}.")
    return True


def find_build_files(repo_dir):
    """Return the names from BUILD_FILES present in *repo_dir*."""
    return [name for name in BUILD_FILES if os.path.isfile(os.path.join(repo_dir, name))]


def check_build_files(repo_dir, dry_run=False):
    """True when *repo_dir* contains a Dockerfile or docker-compose.yml.

    In dry-run mode the clone never happened, so a missing directory passes.
    """
    if dry_run and not os.path.isdir(repo_dir):
        logger.info(f"[dry-run] skipping build file check: {repo_dir} not cloned")
        return True
    if not find_build_files(repo_dir):
        logger.error(f"No Dockerfile or docker-compose.yml found in {repo_dir}.")
        return False
    return True


def detect_exposed_port(repo_dir):
    """First port from an ``EXPOSE`` instruction in the Dockerfile, or None."""
    dockerfile = os.path.join(repo_dir, "Dockerfile")
    if not os.path.isfile(dockerfile):
        return None
    with open(dockerfile) as f:
        match = _EXPOSE_RE.search(f.read())
    return int(match.group(1)) if match else None
