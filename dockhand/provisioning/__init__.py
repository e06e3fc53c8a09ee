"""Command execution: local shell helper, SSH/SCP transport, host provisioning."""

from dockhand.provisioning.remote import check_ssh, provision_remote
from dockhand.provisioning.shell import run_shell_cmd
from dockhand.provisioning.ssh_transport import (
    REMOTE_DEPLOY_DIR,
    make_run_cmd,
    make_upload_file,
    scp_file,
    ssh_base_args,
)

__all__ = [
    "check_ssh",
    "provision_remote",
    "run_shell_cmd",
    "ssh_base_args",
    "make_run_cmd",
    "make_upload_file",
    "scp_file",
    "REMOTE_DEPLOY_DIR",
]
