"""Application source checkout."""

from dockhand.source.repository import (
    BUILD_FILES,
    authenticated_url,
    check_build_files,
    clone_or_update,
    detect_exposed_port,
    find_build_files,
)

__all__ = [
    "BUILD_FILES",
    "authenticated_url",
    "check_build_files",
    "clone_or_update",
    "detect_exposed_port",
    "find_build_files",
]
