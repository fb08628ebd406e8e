# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Patwa Toli API:
# - test_upload_gateway.py / test_asset_urls.py: pure validation and parsing
# - test_asset_store.py / test_entity_store.py: store implementations
# - test_media_lifecycle.py: upload/replace/delete sequencing
# - test_services.py / test_routers.py: entity services and endpoints
# - test_workers.py: Celery tasks
#
# Run tests with: pytest
# =============================================================================
