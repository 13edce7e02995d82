# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the lifecycle rules of the platform:
# - models/: Pydantic schemas for documents and requests
# - authorization.py: the role gate every service runs first
# - services/: project, application, task, modification, user and stats logic
#
# Services receive a DocumentStore and an Identity; they raise typed
# exceptions and never build HTTP responses themselves.
# =============================================================================
