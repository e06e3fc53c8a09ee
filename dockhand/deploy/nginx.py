"""Nginx reverse proxy config generation and installation."""

import logging

from dockhand.logging_setup import log_success

logger = logging.getLogger(__name__)

NGINX_SITE_PATH = "/etc/nginx/sites-available/default"
NGINX_LISTEN_PORT = 80


def generate_nginx_conf(server_name, app_port, listen_port=NGINX_LISTEN_PORT):
    """Generate a single-site nginx config proxying to localhost:<app_port>."""
    return f"""server {{
    listen {listen_port};
    server_name {server_name};

    location / {{
        proxy_pass http://localhost:{app_port};
        proxy_set_header Host $host;
        proxy_set_header X-Real-IP $remote_addr;
        proxy_set_header X-Forwarded-For $proxy_add_x_forwarded_for;
        proxy_set_header X-Forwarded-Proto $scheme;
    }}
}}
"""


async def configure_reverse_proxy(run_cmd, server_name, app_port):
    """Install the site config, validate it and reload nginx.

    Args:
        run_cmd: async callable(command, timeout=..., input_text=...) -> (rc, stdout, stderr)
            executing on the remote host
    """
    logger.info("Configuring Nginx as a reverse proxy on remote server...")
    config = generate_nginx_conf(server_name, app_port)

    logger.info("Uploading Nginx configuration to remote server...")
    rc, _, _ = await run_cmd(f"sudo tee {NGINX_SITE_PATH} > /dev/null", timeout=60, input_text=config)
    if rc != 0:
        logger.error("Failed to upload Nginx configuration to remote server.")
        return False

    logger.info("Testing Nginx configuration on remote server...")
    rc, _, _ = await run_cmd("sudo nginx -t", timeout=60)
    if rc != 0:
        logger.error("Nginx configuration test failed on remote server.")
        return False

    logger.info("Reloading Nginx on remote server...")
    rc, _, _ = await run_cmd("sudo systemctl reload nginx", timeout=120)
    if rc != 0:
        logger.error("Failed to reload Nginx on remote server.")
        return False

    log_success(logger, "Nginx configured successfully as a reverse proxy.")
    return True
