"""Git helpers used to enumerate candidate files."""

from __future__ import annotations

import subprocess
from collections.abc import Callable
from pathlib import Path

from jetmigrate.core.errors import FileListingError

__all__ = ["FileLister", "git_ls"]

FileLister = Callable[[], list[Path]]
"""Provider of candidate paths, relative to the repository root."""


def git_ls(repo_root: Path | None = None) -> list[Path]:
    """Return repository-tracked files.

    Ignored paths and submodule contents are excluded by git itself, so files
    in build output directories are never considered.
    """

    try:
        result = subprocess.run(
            ["git", "ls-files", "-z"],
            check=True,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="surrogateescape",
            cwd=repo_root,
        )
    except FileNotFoundError as exc:
        raise FileListingError("git executable was not found on PATH") from exc
    except subprocess.CalledProcessError as exc:
        detail = (exc.stderr or "").strip() or f"exit status {exc.returncode}"
        msg = f"Failed to execute `git ls-files`! Are you in a git repo? ({detail})"
        raise FileListingError(msg) from exc
    # NUL-separated output is never C-quoted, so names are returned verbatim.
    return [Path(name) for name in result.stdout.split("\0") if name]
