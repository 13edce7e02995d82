# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Collab Platform API:
# - test_models.py: Unit tests for Pydantic model validation
# - test_identity.py / test_authorization.py / test_throttle.py: Auth layer
# - test_document_store.py / test_supabase_store.py: Storage adapters
# - test_*_service.py: Lifecycle rules per service
# - test_api.py: End-to-end scenarios through the HTTP API
#
# Run tests with: pytest
# =============================================================================
