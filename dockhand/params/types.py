"""Deploy parameters dataclass."""

from dataclasses import dataclass, field


@dataclass
class DeployParams:
    """All parameters collected for a single deployment run."""

    repo_url: str
    pat: str = field(repr=False)  # keep the token out of tracebacks
    ssh_user: str
    server_ip: str
    ssh_key_path: str
    app_port: int
    branch: str = "main"
    repo_dir: str = "deployed_repo"
    app_name: str = "app"
    container_port: int | None = None  # None: read EXPOSE from Dockerfile, else 80
    ssh_port: int = 22
    dry_run: bool = False

    @property
    def address(self) -> str:
        """SSH address string (user@host)."""
        return f"{self.ssh_user}@{self.server_ip}"

    @property
    def image_name(self) -> str:
        return f"{self.app_name}_image"
