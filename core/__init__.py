# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the media lifecycle logic:
# - models/: Media value types, entity bindings and request schemas
# - services/: Upload validation, asset/entity stores, lifecycle coordinator
#   and per-entity services
#
# Code in this package should NOT import from FastAPI routers or Celery.
# This keeps the logic testable with the in-memory stores.
# =============================================================================
