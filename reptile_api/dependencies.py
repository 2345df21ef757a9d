"""
FastAPI dependencies for the REST API.

Authentication happens upstream: the gateway forwards the authenticated
username in the ``X-Authenticated-User`` header. The resource registry and
the audit recorder are built once in the application lifespan and stored on
``app.state``.

Usage:
    @router.get("/enclosures")
    def list_enclosures(service: EnclosureService = Depends(get_enclosure_service)):
        ...
"""

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from reptile_api.services.audit import AuditRecorder, build_audit_recorder
from reptile_api.services.context import ServiceContext
from reptile_api.services.domain import EnclosureService, FeedingLogService, ReptileService
from reptile_api.services.principal import SessionPrincipal
from reptile_api.services.resource_types import ResourceTypeRegistry, build_resource_registry
from shared.config.settings import settings
from shared.infrastructure.correlation import PRINCIPAL_HEADER
from shared.infrastructure.db import get_db


def get_principal(
    db: Session = Depends(get_db),
    x_authenticated_user: str | None = Header(default=None, alias=PRINCIPAL_HEADER),
) -> SessionPrincipal:
    """Principal of the current request, resolved lazily against the user table."""
    return SessionPrincipal(db, x_authenticated_user)


def get_resources(request: Request) -> ResourceTypeRegistry:
    resources = getattr(request.app.state, "resources", None)
    if resources is None:
        resources = build_resource_registry()
        request.app.state.resources = resources
    return resources


def get_audit(request: Request) -> AuditRecorder:
    audit = getattr(request.app.state, "audit", None)
    if audit is None:
        audit = build_audit_recorder(settings)
        request.app.state.audit = audit
    return audit


def get_context(
    principal: SessionPrincipal = Depends(get_principal),
    resources: ResourceTypeRegistry = Depends(get_resources),
    audit: AuditRecorder = Depends(get_audit),
) -> ServiceContext:
    return ServiceContext(audit=audit, resources=resources, principal=principal)


# =============================================================================
# Service factories
# =============================================================================


def get_enclosure_service(
    db: Session = Depends(get_db),
    context: ServiceContext = Depends(get_context),
) -> EnclosureService:
    return EnclosureService(db, context)


def get_reptile_service(
    db: Session = Depends(get_db),
    context: ServiceContext = Depends(get_context),
) -> ReptileService:
    return ReptileService(db, context)


def get_feeding_log_service(
    db: Session = Depends(get_db),
    context: ServiceContext = Depends(get_context),
    reptiles: ReptileService = Depends(get_reptile_service),
) -> FeedingLogService:
    return FeedingLogService(db, context, reptiles)
