"""Unit tests for remote host provisioning."""

import asyncio
import logging
from unittest.mock import patch

from dockhand.provisioning.remote import check_ssh, provision_remote, provisioning_steps


def test_provisioning_steps_order():
    commands = [command for _, command, _ in provisioning_steps("ubuntu")]
    assert commands == [
        "mkdir -p ~/deploy",
        "sudo apt update -y",
        "sudo DEBIAN_FRONTEND=noninteractive apt install -y docker.io docker-compose nginx",
        "sudo usermod -aG docker ubuntu",
        "sudo systemctl enable docker && sudo systemctl start docker",
        "sudo systemctl enable nginx && sudo systemctl start nginx",
        "docker --version",
        "docker-compose --version",
        "nginx -v",
    ]


def test_provision_remote_runs_every_step(recording_runner, caplog):
    caplog.set_level(logging.INFO)
    runner = recording_runner()
    ok = asyncio.run(provision_remote("ubuntu@10.0.0.1", "/keys/id", run_cmd=runner))

    assert ok
    assert len(runner.commands) == len(provisioning_steps("ubuntu"))
    assert "sudo usermod -aG docker ubuntu" in runner.commands
    assert "Remote environment prepared successfully." in caplog.text


def test_provision_remote_explicit_user(recording_runner):
    runner = recording_runner()
    asyncio.run(provision_remote("10.0.0.1", "/keys/id", ssh_user="deploy", run_cmd=runner))
    assert "sudo usermod -aG docker deploy" in runner.commands


def test_provision_remote_stops_at_first_failure(recording_runner, caplog):
    runner = recording_runner(fail_on="apt install")
    ok = asyncio.run(provision_remote("ubuntu@10.0.0.1", "/keys/id", run_cmd=runner))

    assert not ok
    assert runner.commands[-1].endswith("apt install -y docker.io docker-compose nginx")
    assert not any("usermod" in c for c in runner.commands)
    assert "Failed to install required packages on remote server." in caplog.text


def test_provision_remote_verification_failure(recording_runner, caplog):
    runner = recording_runner(fail_on="nginx -v")
    ok = asyncio.run(provision_remote("ubuntu@10.0.0.1", "/keys/id", run_cmd=runner))
    assert not ok
    assert "Nginx installation verification failed." in caplog.text


def test_provision_remote_dry_run(caplog):
    caplog.set_level(logging.INFO)
    ok = asyncio.run(provision_remote("ubuntu@10.0.0.1", "/keys/id", dry_run=True))
    assert ok
    assert "[dry-run] ssh ubuntu@10.0.0.1: sudo apt update -y" in caplog.text


# ── check_ssh ───────────────────────────────────────────────────────


def test_check_ssh_uses_connect_timeout(recording_runner):
    runner = recording_runner()
    with patch("dockhand.provisioning.remote.make_run_cmd", return_value=runner) as mock_make:
        ok = asyncio.run(check_ssh("ubuntu@10.0.0.1", "/keys/id"))

    assert ok
    assert mock_make.call_args.kwargs["connect_timeout"] == 10
    assert mock_make.call_args.kwargs["workdir"] is None
    assert runner.commands == ["echo 'SSH connection successful.'"]


def test_check_ssh_failure(recording_runner, caplog):
    runner = recording_runner(fail_on="echo")
    with patch("dockhand.provisioning.remote.make_run_cmd", return_value=runner):
        ok = asyncio.run(check_ssh("ubuntu@10.0.0.1", "/keys/id"))

    assert not ok
    assert "SSH connection to ubuntu@10.0.0.1 failed." in caplog.text
