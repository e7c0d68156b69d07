"""Shared models and constants for the lamma CLI."""

from lamma_common.constants import (
    BASE_FPM_PORT,
    DEFAULT_PHP_VERSION,
    FPM_LISTEN_HOST,
    HOSTS_MARKER,
    LEGACY_PHP_VERSION,
    NOT_AVAILABLE,
)
from lamma_common.config import LammaConfig
from lamma_common.models import (
    AuditEvent,
    ManagedProject,
    NginxSiteBinding,
    PhpPoolConfig,
    PoolAssignment,
    PoolScan,
    ScanIssue,
    SiteConfig,
)

__all__ = [
    "AuditEvent",
    "BASE_FPM_PORT",
    "DEFAULT_PHP_VERSION",
    "FPM_LISTEN_HOST",
    "HOSTS_MARKER",
    "LEGACY_PHP_VERSION",
    "LammaConfig",
    "ManagedProject",
    "NOT_AVAILABLE",
    "NginxSiteBinding",
    "PhpPoolConfig",
    "PoolAssignment",
    "PoolScan",
    "ScanIssue",
    "SiteConfig",
]
