"""
Collaborators shared by every persistence service.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from reptile_api.services.audit import AuditRecorder, Clock, utc_now
from reptile_api.services.principal import PrincipalProvider
from reptile_api.services.resource_types import ResourceTypeRegistry


@dataclass(frozen=True)
class ServiceContext:
    """
    Injected dependencies of the read and CRUD services.

    Attributes:
        audit: Recorder receiving one event per audited operation.
        resources: Resource-type registry built at startup.
        principal: Source of the acting principal and its owner id.
        clock: Time source for audit stamps.
    """

    audit: AuditRecorder
    resources: ResourceTypeRegistry
    principal: PrincipalProvider
    clock: Clock = field(default=utc_now)

    @property
    def actor(self) -> str:
        return self.principal.current_identifier()
