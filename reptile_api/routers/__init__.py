"""
API routers.

- enclosures: /api/enclosures
- reptiles: /api/reptiles
- feedings: /api/reptiles/{reptile_id}/feedings

Routers only translate HTTP to service calls; failures propagate as
``AppException`` and are rendered by the handler in ``reptile_api.main``.
"""

from .enclosures import router as enclosures_router
from .feedings import router as feedings_router
from .reptiles import router as reptiles_router

__all__ = ["enclosures_router", "reptiles_router", "feedings_router"]
