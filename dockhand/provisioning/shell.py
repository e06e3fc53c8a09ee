"""Local command execution helper."""

import asyncio
import logging
import shlex

logger = logging.getLogger(__name__)


async def run_shell_cmd(command, dry_run=False, timeout=600, log_output=False):
    """Run a local command and return (returncode, stdout, stderr).

    Args:
        command: list of command arguments
        dry_run: if True, log the command instead of executing
        timeout: maximum seconds to wait for the command
        log_output: if True, log each line of stdout and stderr at INFO

    Returns:
        (returncode, stdout, stderr) tuple
    """
    if dry_run:
        logger.info(f"[dry-run] {shlex.join(command)}")
        return 0, "", ""

    try:
        proc = await asyncio.create_subprocess_exec(
            *command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError:
        logger.error(f"Error: '{command[0]}' not found. Is it installed and on PATH?")
        return 1, "", f"'{command[0]}' not found"

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except TimeoutError:
        logger.error(f"Command timed out after {timeout}s: {shlex.join(command)}")
        proc.kill()
        await proc.wait()
        return 1, "", ""

    stdout = stdout_bytes.decode(errors="replace") if stdout_bytes else ""
    stderr = stderr_bytes.decode(errors="replace") if stderr_bytes else ""
    if log_output:
        for line in stdout.splitlines():
            logger.info(line)
        # git reports progress on stderr; failures are logged by the caller
        for line in stderr.splitlines():
            logger.info(line)
    return proc.returncode, stdout, stderr
