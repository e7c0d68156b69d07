"""Action history for lamma commands.

Every mutating command runs inside :func:`audit`, which appends one
``AuditEvent`` to ``<lamma>/logs/audit.jsonl`` and to the ``audit_logs`` table
of ``<lamma>/logs/audit.db``. :func:`read_events` is the read side used by
``lamma history``.
"""

from __future__ import annotations

import getpass
import json
import logging
import os
import sqlite3
import time
from contextlib import closing, contextmanager
from pathlib import Path
from typing import Any, Generator

from lamma_common import AuditEvent, LammaConfig

from lamma.config import get_config

log = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS audit_logs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    timestamp TEXT NOT NULL,
    actor TEXT NOT NULL,
    action TEXT NOT NULL,
    target TEXT NOT NULL DEFAULT '',
    params TEXT NOT NULL DEFAULT '{}',
    result TEXT NOT NULL DEFAULT 'success',
    error TEXT,
    duration_ms INTEGER
);
CREATE INDEX IF NOT EXISTS idx_audit_timestamp ON audit_logs(timestamp);
CREATE INDEX IF NOT EXISTS idx_audit_target ON audit_logs(target);
"""

_COLUMNS = ("timestamp", "actor", "action", "target", "params", "result", "error", "duration_ms")


def _current_actor() -> str:
    return os.environ.get("LAMMA_ACTOR") or getpass.getuser()


def _open_db(db_path: Path) -> sqlite3.Connection:
    conn = sqlite3.connect(str(db_path))
    conn.executescript(_SCHEMA)
    return conn


def _write_jsonl(path: Path, event: AuditEvent) -> None:
    with open(path, "a", encoding="utf-8") as f:
        f.write(event.to_jsonl() + "\n")


def _write_sqlite(db_path: Path, event: AuditEvent) -> None:
    row = event.model_dump(mode="json")
    row["params"] = json.dumps(row["params"])
    placeholders = ", ".join("?" for _ in _COLUMNS)
    with closing(_open_db(db_path)) as conn, conn:
        conn.execute(
            f"INSERT INTO audit_logs ({', '.join(_COLUMNS)}) VALUES ({placeholders})",
            tuple(row[c] for c in _COLUMNS),
        )


def record(event: AuditEvent, cfg: LammaConfig | None = None) -> None:
    """Append ``event`` to the JSONL file and the SQLite table."""
    cfg = cfg or get_config()
    cfg.logs_dir.mkdir(parents=True, exist_ok=True)
    _write_jsonl(cfg.audit_jsonl_path, event)
    _write_sqlite(cfg.audit_db_path, event)


def read_events(
    cfg: LammaConfig,
    *,
    action: str | None = None,
    target: str | None = None,
    failed_only: bool = False,
    limit: int = 20,
) -> list[AuditEvent]:
    """Newest-first events from the SQLite history, optionally filtered."""
    if not cfg.audit_db_path.exists():
        return []

    clauses: list[str] = []
    args: list[Any] = []
    if action:
        clauses.append("action LIKE ?")
        args.append(f"{action}%")
    if target:
        clauses.append("target = ?")
        args.append(target)
    if failed_only:
        clauses.append("result = 'failure'")
    where = f" WHERE {' AND '.join(clauses)}" if clauses else ""

    with closing(_open_db(cfg.audit_db_path)) as conn:
        conn.row_factory = sqlite3.Row
        rows = conn.execute(
            f"SELECT {', '.join(_COLUMNS)} FROM audit_logs{where} ORDER BY id DESC LIMIT ?",
            (*args, limit),
        ).fetchall()
    return [AuditEvent.model_validate({**dict(r), "params": json.loads(r["params"])}) for r in rows]


@contextmanager
def audit(action: str, target: str = "", **params: Any) -> Generator[AuditEvent, None, None]:
    """Time the wrapped block and record it as success or failure.

    The yielded event's ``params`` may be extended inside the block. A failure
    to write the history is logged and never replaces the block's own error.
    """
    event = AuditEvent(actor=_current_actor(), action=action, target=target, params=params)
    start = time.monotonic()
    try:
        yield event
    except Exception as exc:
        event.result = "failure"
        event.error = str(exc) or type(exc).__name__
        _finish(event, start)
        raise
    _finish(event, start)


def _finish(event: AuditEvent, start: float) -> None:
    event.duration_ms = int((time.monotonic() - start) * 1000)
    try:
        record(event)
    except (OSError, sqlite3.Error) as exc:
        log.warning("Could not write audit history: %s", exc)
