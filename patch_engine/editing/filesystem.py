"""
Filesystem capability used by the editor, plus the local-disk default.
"""

from __future__ import annotations

import os
import shutil
from typing import Protocol


class FileSystem(Protocol):
    def resolve(self, path: str) -> str: ...
    def exists(self, path: str) -> bool: ...
    def is_directory(self, path: str) -> bool: ...
    def list_dir(self, path: str) -> list[str]: ...
    def read_text(self, path: str) -> str: ...
    def write_text(self, path: str, content: str) -> None: ...
    def ensure_parent_dirs(self, path: str) -> None: ...
    def remove(self, path: str) -> None: ...


class LocalFileSystem:
    """Read and write files on local disk, relative to *root*.

    Every method takes the caller's path and resolves it itself, so errors
    raised here are plain ``OSError`` subclasses.
    """

    def __init__(self, root: str | None = None) -> None:
        self.root = os.path.abspath(root or os.getcwd())

    def resolve(self, path: str) -> str:
        return os.path.normpath(os.path.join(self.root, os.path.expanduser(path)))

    def exists(self, path: str) -> bool:
        return os.path.exists(self.resolve(path))

    def is_directory(self, path: str) -> bool:
        return os.path.isdir(self.resolve(path))

    def list_dir(self, path: str) -> list[str]:
        return sorted(os.listdir(self.resolve(path)))

    def read_text(self, path: str) -> str:
        # newline="" keeps \r\n intact so diffs and writes are lossless
        with open(self.resolve(path), "r", encoding="utf-8", newline="") as f:
            return f.read()

    def write_text(self, path: str, content: str) -> None:
        """Write *content* atomically via temp file + rename."""
        abs_path = self.resolve(path)
        tmp_path = abs_path + ".patchengine_tmp"

        try:
            with open(tmp_path, "w", encoding="utf-8", newline="") as f:
                f.write(content)

            # On Windows, os.rename fails if destination exists
            if os.path.exists(abs_path):
                shutil.move(tmp_path, abs_path)
            else:
                os.rename(tmp_path, abs_path)
        except Exception:
            # Clean up temp file on failure
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise

    def ensure_parent_dirs(self, path: str) -> None:
        parent = os.path.dirname(self.resolve(path))
        if parent:
            os.makedirs(parent, exist_ok=True)

    def remove(self, path: str) -> None:
        abs_path = self.resolve(path)
        if os.path.isdir(abs_path):
            shutil.rmtree(abs_path)
        else:
            os.remove(abs_path)
