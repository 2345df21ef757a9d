"""
Shared module for infrastructure concerns with no domain knowledge.

STRUCTURE:
- shared.config: Configuration
  - settings.py: Environment config (pydantic-settings)
  - logging.py: Structured logging

- shared.infrastructure: Database and request context
  - db.py: SQLAlchemy engine and sessions, safe_commit()
  - correlation.py: Request correlation IDs for logs

- shared.utils: Utilities
  - exceptions.py: Typed application exceptions with auto-logging

IMPORT EXAMPLES:
    from shared.infrastructure.db import get_db, safe_commit
    from shared.config.settings import settings
    from shared.config.logging import get_logger
    from shared.utils.exceptions import NotFoundError, InvalidArgumentError
"""
