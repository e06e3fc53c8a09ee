"""SSH transport: run commands and copy files to the remote server via SSH/SCP."""

import asyncio
import logging
import os
import re
import shlex

logger = logging.getLogger(__name__)

REMOTE_DEPLOY_DIR = "~/deploy"

_SSH_OPTIONS = [
    "-o", "StrictHostKeyChecking=accept-new",
    "-o", "BatchMode=yes",
    "-o", "ServerAliveInterval=60",
    "-o", "ServerAliveCountMax=5",
]


def ssh_base_args(server, ssh_key, ssh_port=22, connect_timeout=None):
    """Build base SSH arguments."""
    args = ["ssh", *_SSH_OPTIONS]
    if connect_timeout:
        args += ["-o", f"ConnectTimeout={connect_timeout}"]
    if ssh_key:
        args += ["-i", os.path.expanduser(ssh_key)]
    if ssh_port and ssh_port != 22:
        args += ["-p", str(ssh_port)]
    args.append(server)
    return args


def _double_quote(command):
    return '"' + re.sub(r'([\\"$`])', r"\\\1", command) + '"'


def remote_command(command, workdir=None):
    """Wrap *command* for the remote shell.

    Docker commands run under ``sg docker`` so a docker group membership
    added earlier in the same run applies without a new login.
    """
    inner = f"cd {workdir} && {command}" if workdir else command
    if command.strip().startswith("docker"):
        return f"sg docker -c {_double_quote(inner)}"
    return inner


def make_run_cmd(server, ssh_key, ssh_port=22, workdir=REMOTE_DEPLOY_DIR, dry_run=False, connect_timeout=None):
    """Create a run_cmd callable for SSH execution.

    Args:
        workdir: remote directory to cd into first, or None for the login directory
    """

    async def run_cmd(command, timeout=600, log_output=True, input_text=None):
        full_cmd = remote_command(command, workdir)
        if dry_run:
            logger.info(f"[dry-run] ssh {server}: {full_cmd}")
            return 0, "", ""

        ssh_args = ssh_base_args(server, ssh_key, ssh_port, connect_timeout=connect_timeout)
        ssh_args.append(full_cmd)

        try:
            proc = await asyncio.create_subprocess_exec(
                *ssh_args,
                stdin=asyncio.subprocess.PIPE if input_text is not None else asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.error(f"Error running SSH command: {e}")
            return 1, "", str(e)

        stdout_lines, stderr_lines = [], []

        async def _feed_stdin():
            if input_text is None:
                return
            try:
                proc.stdin.write(input_text.encode())
                await proc.stdin.drain()
            except (BrokenPipeError, ConnectionResetError):
                # Remote side exited early; its return code reports the failure
                logger.debug("SSH stdin closed before input was fully written")
            finally:
                proc.stdin.close()

        async def _read_stream(pipe, lines):
            async for raw_line in pipe:
                line = raw_line.decode(errors="replace").rstrip("\n")
                if log_output:
                    logger.info(line)
                lines.append(line)

        try:
            await asyncio.wait_for(
                asyncio.gather(
                    _feed_stdin(),
                    _read_stream(proc.stdout, stdout_lines),
                    _read_stream(proc.stderr, stderr_lines),
                    proc.wait(),
                ),
                timeout=timeout,
            )
        except TimeoutError:
            logger.error(f"Command timed out after {timeout}s: {command}")
            proc.kill()
            await proc.wait()
            return 1, "", ""
        return proc.returncode, "\n".join(stdout_lines), "\n".join(stderr_lines)

    return run_cmd


async def scp_file(local_path, server, ssh_key, ssh_port, remote_path, timeout=300, dry_run=False):
    """Copy a file to the remote server via SCP.

    Returns:
        (returncode, stderr) tuple
    """
    scp_args = ["scp", *_SSH_OPTIONS]
    if ssh_key:
        scp_args += ["-i", os.path.expanduser(ssh_key)]
    if ssh_port and ssh_port != 22:
        scp_args += ["-P", str(ssh_port)]
    scp_args += [local_path, f"{server}:{remote_path}"]

    if dry_run:
        logger.info(f"[dry-run] {shlex.join(scp_args)}")
        return 0, ""

    try:
        proc = await asyncio.create_subprocess_exec(
            *scp_args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        logger.error(f"Error running scp: {e}")
        return 1, str(e)

    try:
        _, stderr_bytes = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except TimeoutError:
        logger.error(f"SCP timed out after {timeout}s: {local_path} -> {server}:{remote_path}")
        proc.kill()
        await proc.wait()
        return 1, "timeout"
    stderr = stderr_bytes.decode(errors="replace") if stderr_bytes else ""
    return proc.returncode, stderr


def make_upload_file(server, ssh_key, ssh_port=22, dry_run=False):
    """Create an upload callable that SCPs a local file into REMOTE_DEPLOY_DIR."""

    async def upload_file(local_path, name):
        remote_path = f"{REMOTE_DEPLOY_DIR}/{name}"
        rc, stderr = await scp_file(local_path, server, ssh_key, ssh_port, remote_path, dry_run=dry_run)
        if rc != 0:
            logger.error(f"Failed to copy {name} to {server}:{remote_path}: {stderr.strip()}")
        return rc == 0

    return upload_file
