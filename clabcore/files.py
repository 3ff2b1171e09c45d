"""File helpers: existence checks, copying (also from HTTP) and reading."""

from __future__ import annotations

import os
import shutil
import stat
import urllib.error
import urllib.request
from typing import BinaryIO, ContextManager


class NonRegularFileError(OSError):
    """Raised when a copy involves something that is not a regular file."""


class FileNotExistError(FileNotFoundError):
    """Raised when a file that must be read does not exist."""


class HTTPFetchError(OSError):
    """Raised when an http(s) resource cannot be fetched."""


def _is_http(src: str) -> bool:
    return src.startswith(("http://", "https://"))


def file_exists(filename: str | os.PathLike) -> bool:
    """Return True if ``filename`` exists and is not a directory."""
    try:
        info = os.stat(filename)
    except (FileNotFoundError, NotADirectoryError):
        return False
    return not stat.S_ISDIR(info.st_mode)


def _describe(path: str | os.PathLike, info: os.stat_result) -> str:
    return f"{os.path.basename(os.fspath(path))} ({stat.filemode(info.st_mode)!r})"


def copy_file(src: str, dst: str | os.PathLike, mode: int = 0o644) -> None:
    """Copy ``src`` to ``dst`` unless both already name the same file.

    ``src`` may be an http(s) URL. Non-regular files are refused.
    """
    src_info = None
    if not _is_http(src):
        src_info = os.stat(src)
        if not stat.S_ISREG(src_info.st_mode):
            raise NonRegularFileError(
                f"file copy failed: source file {_describe(src, src_info)}: "
                "non-regular file"
            )

    try:
        dst_info = os.stat(dst)
    except FileNotFoundError:
        dst_info = None

    if dst_info is not None:
        if not stat.S_ISREG(dst_info.st_mode):
            raise NonRegularFileError(
                f"file copy failed: destination file {_describe(dst, dst_info)}: "
                "non-regular file"
            )
        if src_info is not None and os.path.samestat(src_info, dst_info):
            return

    copy_file_contents(src, dst, mode)


def _open_source(src: str) -> ContextManager[BinaryIO]:
    if _is_http(src):
        try:
            response = urllib.request.urlopen(src)
        except (urllib.error.URLError, OSError, ValueError) as exc:
            raise HTTPFetchError(f"failed to fetch http(s) resource: {src}") from exc
        if response.status != 200:
            response.close()
            raise HTTPFetchError(f"failed to fetch http(s) resource: {src}")
        return response
    return open(src, "rb")


def copy_file_contents(src: str, dst: str | os.PathLike, mode: int = 0o644) -> None:
    """Write the contents of ``src`` (a path or http(s) URL) into ``dst``.

    ``dst`` is created or truncated and given permissions ``mode``.
    """
    with _open_source(src) as reader, open(dst, "wb") as writer:
        os.chmod(dst, mode)
        shutil.copyfileobj(reader, writer)
        writer.flush()
        os.fsync(writer.fileno())


def create_file(path: str | os.PathLike, content: str) -> None:
    """Write ``content`` followed by a newline to ``path``."""
    with open(path, "w", encoding="utf-8") as handle:
        handle.write(content + "\n")


def create_directory(path: str | os.PathLike, perm: int = 0o755) -> None:
    """Create ``path`` and its parents if it does not exist yet."""
    if not os.path.exists(path):
        try:
            os.makedirs(path, perm, exist_ok=True)
        except OSError:
            pass


def read_file_content(path: str | os.PathLike) -> bytes:
    """Return the bytes of an existing file."""
    if not file_exists(path):
        raise FileNotExistError(f"file does not exist: {os.fspath(path)}")
    with open(path, "rb") as handle:
        return handle.read()