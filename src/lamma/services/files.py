"""Locked, atomic rewrites of shared config files."""

from __future__ import annotations

import fcntl
import hashlib
import logging
import os
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from lamma.errors import FileSystemError
from lamma.services import shell

log = logging.getLogger(__name__)


def _lock_name(path: Path) -> str:
    digest = hashlib.sha1(str(path.resolve()).encode()).hexdigest()[:12]
    return f"{path.name}.{digest}.lock"


@contextmanager
def locked(path: Path, lock_dir: Path) -> Generator[None, None, None]:
    """Hold an exclusive advisory lock for ``path`` across lamma invocations."""
    lock_dir.mkdir(parents=True, exist_ok=True)
    lock_path = lock_dir / _lock_name(path)
    with open(lock_path, "w") as fh:
        fcntl.flock(fh.fileno(), fcntl.LOCK_EX)
        try:
            yield
        finally:
            fcntl.flock(fh.fileno(), fcntl.LOCK_UN)


def read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise FileSystemError(path, exc.strerror or str(exc)) from exc


def atomic_write(path: Path, content: str) -> None:
    """Write ``content`` to a sibling temp file, then rename it over ``path``."""
    try:
        fd, tmp = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(content)
            if path.exists():
                shutil.copymode(str(path), tmp)
            os.replace(tmp, path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise
    except OSError as exc:
        raise FileSystemError(path, exc.strerror or str(exc)) from exc


def privileged_write(path: Path, content: str) -> None:
    """Replace a file the operator may not own (e.g. /etc/hosts).

    Writable targets are replaced atomically in place; otherwise the content is
    staged in a temp file and installed with ``sudo cp``.
    """
    if os.access(path, os.W_OK) and os.access(path.parent, os.W_OK):
        atomic_write(path, content)
        return

    fd, tmp = tempfile.mkstemp(prefix="lamma-", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(content)
        log.debug("Installing %s via sudo", path)
        shell.sudo(["cp", tmp, str(path)])
    finally:
        os.unlink(tmp)


def backup_once(path: Path, backup: Path) -> bool:
    """Copy ``path`` to ``backup`` unless a backup already exists."""
    if backup.exists():
        return False
    try:
        shutil.copy2(str(path), str(backup))
    except OSError as exc:
        raise FileSystemError(path, exc.strerror or str(exc)) from exc
    return True
