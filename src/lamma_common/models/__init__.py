"""Shared Pydantic models."""

from lamma_common.models.audit_event import AuditEvent
from lamma_common.models.php import PhpPoolConfig, PoolAssignment, PoolScan, ScanIssue
from lamma_common.models.site import ManagedProject, NginxSiteBinding, SiteConfig

__all__ = [
    "AuditEvent",
    "ManagedProject",
    "NginxSiteBinding",
    "PhpPoolConfig",
    "PoolAssignment",
    "PoolScan",
    "ScanIssue",
    "SiteConfig",
]
