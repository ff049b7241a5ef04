"""
Version information for Niche Bundler.

Single source of truth: pyproject.toml
Runtime access via importlib.metadata with fallback.
"""

from __future__ import annotations

import os
import subprocess
import sys
from functools import lru_cache
from typing import Any

# Fallback version if package metadata unavailable (dev mode)
_FALLBACK_VERSION = "1.0.0"

DISTRIBUTION_NAME = "niche-bundler"


def get_version() -> str:
    """Get the package version from metadata or fallback."""
    from importlib.metadata import PackageNotFoundError, version

    try:
        return version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        return _FALLBACK_VERSION


VERSION = get_version()


@lru_cache(maxsize=1)
def get_git_info() -> dict[str, str | None]:
    """
    Get git commit info (cached for performance).

    Returns:
        dict with commit hash, branch name, and source
    """
    # Docker build args first
    commit = os.environ.get("GIT_COMMIT")
    branch = os.environ.get("GIT_BRANCH")

    if commit:
        return {"commit": commit[:8], "branch": branch, "source": "env"}

    try:
        commit = subprocess.check_output(
            ["git", "rev-parse", "--short", "HEAD"],
            stderr=subprocess.DEVNULL,
            text=True,
            timeout=5,
        ).strip()
        branch = subprocess.check_output(
            ["git", "rev-parse", "--abbrev-ref", "HEAD"],
            stderr=subprocess.DEVNULL,
            text=True,
            timeout=5,
        ).strip()
        return {"commit": commit, "branch": branch, "source": "git"}
    except (OSError, subprocess.SubprocessError):
        return {"commit": None, "branch": None, "source": None}


def version_info() -> dict[str, Any]:
    """
    Get comprehensive version information.

    Returns:
        dict with version, python_version and git info
    """
    git = get_git_info()

    return {
        "version": VERSION,
        "python_version": f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
        "git_commit": git.get("commit"),
        "git_branch": git.get("branch"),
        "build_number": os.environ.get("BUILD_NUMBER"),
    }


def version_string() -> str:
    """
    Get formatted version string for display.

    Returns:
        Formatted version string like "v1.0.0 (abc1234)"
    """
    info = version_info()
    parts = [f"v{info['version']}"]
    if info.get("git_commit"):
        parts.append(f"({info['git_commit']})")
    return " ".join(parts)
