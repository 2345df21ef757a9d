"""
Persistence services.

Generic layer:
- base_service: ReadService, CrudService
- owner_scoped: OwnerScopedService, ParentScopedService
- audit: AuditRecorder and sinks
- resource_types: ResourceTypeRegistry
- statistics: pure statistic functions

Domain services live in ``reptile_api.services.domain``.
"""

from .audit import AuditRecorder, AuditEvent, AuditOperationType, build_audit_recorder
from .base_service import CrudService, ReadService
from .context import ServiceContext
from .owner_scoped import OwnerScopedService, ParentScopedService
from .principal import PrincipalProvider, SessionPrincipal, StaticPrincipal
from .resource_types import ResourceType, ResourceTypeRegistry, build_resource_registry

__all__ = [
    "AuditRecorder",
    "AuditEvent",
    "AuditOperationType",
    "build_audit_recorder",
    "CrudService",
    "ReadService",
    "ServiceContext",
    "OwnerScopedService",
    "ParentScopedService",
    "PrincipalProvider",
    "SessionPrincipal",
    "StaticPrincipal",
    "ResourceType",
    "ResourceTypeRegistry",
    "build_resource_registry",
]
