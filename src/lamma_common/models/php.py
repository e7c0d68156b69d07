"""PHP-FPM pool models."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from lamma_common.constants import NOT_AVAILABLE


class PhpPoolConfig(BaseModel):
    """One installed PHP runtime's FPM pool, as found on disk."""

    version: str
    config_file_path: Path
    ini_file_path: Path
    listen_port: str = NOT_AVAILABLE
    process_owner: str = NOT_AVAILABLE
    process_group: str = NOT_AVAILABLE

    @property
    def has_tcp_port(self) -> bool:
        return self.listen_port.isdigit()


class ScanIssue(BaseModel):
    """A version directory that was found but could not be used."""

    version: str
    path: Path
    error: str


class PoolScan(BaseModel):
    """Result of scanning the PHP versions directory, in listing order."""

    pools: list[PhpPoolConfig] = Field(default_factory=list)
    errors: list[ScanIssue] = Field(default_factory=list)

    def find(self, version: str) -> PhpPoolConfig | None:
        for pool in self.pools:
            if pool.version == version:
                return pool
        return None


class PoolAssignment(BaseModel):
    """Outcome of assigning a port and owner to one pool."""

    version: str
    config_file_path: Path
    port: str
    owner: str
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
