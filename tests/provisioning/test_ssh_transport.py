"""Unit tests for SSH/SCP argument building and dry-run execution."""

import asyncio
import logging
import os

from dockhand.provisioning.ssh_transport import (
    REMOTE_DEPLOY_DIR,
    make_run_cmd,
    make_upload_file,
    remote_command,
    scp_file,
    ssh_base_args,
)

# ── ssh_base_args ───────────────────────────────────────────────────


def test_ssh_base_args_defaults():
    args = ssh_base_args("ubuntu@10.0.0.1", "/keys/id")
    assert args[0] == "ssh"
    assert args[-1] == "ubuntu@10.0.0.1"
    assert "BatchMode=yes" in args
    assert args[args.index("-i") + 1] == "/keys/id"
    assert "-p" not in args
    assert not any(a.startswith("ConnectTimeout") for a in args)


def test_ssh_base_args_port_and_timeout():
    args = ssh_base_args("ubuntu@10.0.0.1", None, 2222, connect_timeout=10)
    assert "-i" not in args
    assert args[args.index("-p") + 1] == "2222"
    assert "ConnectTimeout=10" in args


def test_ssh_base_args_expands_key_path(monkeypatch):
    monkeypatch.setenv("HOME", "/home/op")
    args = ssh_base_args("u@h", "~/.ssh/id_rsa")
    assert args[args.index("-i") + 1] == os.path.join("/home/op", ".ssh", "id_rsa")


# ── remote_command ──────────────────────────────────────────────────


def test_remote_command_plain():
    assert remote_command("sudo nginx -t") == "sudo nginx -t"


def test_remote_command_workdir():
    assert remote_command("ls", workdir="~/deploy") == "cd ~/deploy && ls"


def test_remote_command_docker_runs_under_sg():
    assert remote_command("docker ps", workdir="~/deploy") == 'sg docker -c "cd ~/deploy && docker ps"'


def test_remote_command_escapes_double_quoted_characters():
    cmd = remote_command('docker run -e A="$B" img')
    assert cmd == 'sg docker -c "docker run -e A=\\"\\$B\\" img"'


# ── dry-run ─────────────────────────────────────────────────────────


def test_run_cmd_dry_run_logs(caplog):
    caplog.set_level(logging.INFO)
    run_cmd = make_run_cmd("ubuntu@10.0.0.1", "/keys/id", dry_run=True)
    rc, stdout, stderr = asyncio.run(run_cmd("docker build -t app_image ."))

    assert (rc, stdout, stderr) == (0, "", "")
    assert f'[dry-run] ssh ubuntu@10.0.0.1: sg docker -c "cd {REMOTE_DEPLOY_DIR} && docker build -t app_image ."' in caplog.text


def test_scp_file_dry_run(caplog):
    caplog.set_level(logging.INFO)
    rc, _ = asyncio.run(scp_file("/tmp/a.tgz", "u@h", "/keys/id", 2200, "~/deploy/a.tgz", dry_run=True))

    assert rc == 0
    assert "[dry-run] scp" in caplog.text
    assert "-P 2200" in caplog.text
    assert "u@h:~/deploy/a.tgz" in caplog.text


def test_upload_file_dry_run(caplog):
    caplog.set_level(logging.INFO)
    upload = make_upload_file("u@h", "/keys/id", dry_run=True)
    assert asyncio.run(upload("/tmp/ctx.tgz", "ctx.tgz"))
    assert f"u@h:{REMOTE_DEPLOY_DIR}/ctx.tgz" in caplog.text


def test_run_cmd_missing_ssh_binary(monkeypatch, caplog):
    monkeypatch.setenv("PATH", "/nonexistent")
    run_cmd = make_run_cmd("u@h", None)
    rc, _, _ = asyncio.run(run_cmd("true"))
    assert rc == 1
    assert "Error running SSH command" in caplog.text
