"""MySQL databases for sites, via PyMySQL."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Generator

import pymysql

from lamma_common import LammaConfig

from lamma.errors import DatabaseError

log = logging.getLogger(__name__)


def _quote(name: str) -> str:
    return "`" + name.replace("`", "``") + "`"


@contextmanager
def _connect(cfg: LammaConfig) -> Generator[pymysql.connections.Connection, None, None]:
    try:
        conn = pymysql.connect(host=cfg.db_host, user=cfg.db_user, password=cfg.db_password)
    except pymysql.MySQLError as exc:
        raise DatabaseError(f"Cannot connect to MySQL at {cfg.db_host}: {exc}") from exc
    try:
        yield conn
    finally:
        conn.close()


def _execute(cfg: LammaConfig, sql: str, args: tuple = ()) -> tuple:
    with _connect(cfg) as conn:
        try:
            with conn.cursor() as cur:
                cur.execute(sql, args or None)
                rows = cur.fetchall()
            conn.commit()
        except pymysql.MySQLError as exc:
            raise DatabaseError(f"{sql.strip()}: {exc}") from exc
    return rows


def create_database(cfg: LammaConfig, name: str) -> None:
    _execute(cfg, f"CREATE DATABASE IF NOT EXISTS {_quote(name)}")
    log.info("Database %s created (or already exists)", name)


def drop_database(cfg: LammaConfig, name: str) -> None:
    _execute(cfg, f"DROP DATABASE IF EXISTS {_quote(name)}")
    log.info("Database %s dropped", name)


def database_size_mb(cfg: LammaConfig, name: str) -> int:
    rows = _execute(
        cfg,
        "SELECT SUM(data_length + index_length) FROM information_schema.tables "
        "WHERE table_schema = %s",
        (name,),
    )
    total = rows[0][0] if rows and rows[0][0] is not None else 0
    return int(total) // (1024 * 1024)
