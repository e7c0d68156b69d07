"""Sequential PHP-FPM port allocator ("php doctor").

Every discovered pool gets ``base_port + index`` in scan order and is set to
run as the invoking user. Ports are not bind-tested against the OS.
"""

from __future__ import annotations

import getpass
import logging
from pathlib import Path

from lamma_common import BASE_FPM_PORT, FPM_LISTEN_HOST, PhpPoolConfig, PoolAssignment

from lamma.errors import LammaError
from lamma.services import files
from lamma.services.php_pools import PoolDirectives

log = logging.getLogger(__name__)

BACKUP_SUFFIX = ".lamma.backup"


def rewrite_pool_config(text: str, *, port: str, owner: str) -> str:
    """Return ``text`` with ``user`` and ``listen`` replaced, all else untouched."""
    directives = PoolDirectives(text)
    directives.set("user", owner)
    directives.set("listen", f"{FPM_LISTEN_HOST}:{port}")
    return directives.render()


def _apply(config_path: Path, port: str, owner: str, lock_dir: Path) -> None:
    with files.locked(config_path, lock_dir):
        text = files.read_text(config_path)
        files.backup_once(config_path, config_path.with_name(config_path.name + BACKUP_SUFFIX))
        files.atomic_write(config_path, rewrite_pool_config(text, port=port, owner=owner))


def assign_ports(
    pools: list[PhpPoolConfig],
    *,
    lock_dir: Path,
    base_port: int = BASE_FPM_PORT,
    owner: str | None = None,
) -> list[PoolAssignment]:
    """Assign sequential ports to ``pools``, continuing past per-pool failures."""
    owner = owner or getpass.getuser()
    results: list[PoolAssignment] = []
    for index, pool in enumerate(pools):
        port = str(base_port + index)
        result = PoolAssignment(
            version=pool.version,
            config_file_path=pool.config_file_path,
            port=port,
            owner=owner,
        )
        try:
            _apply(pool.config_file_path, port, owner, lock_dir)
        except LammaError as exc:
            log.error("Error modifying PHP-FPM configuration for %s: %s", pool.version, exc)
            result.error = str(exc)
        else:
            log.info("PHP %s: user=%s listen=%s:%s", pool.version, owner, FPM_LISTEN_HOST, port)
        results.append(result)
    return results
