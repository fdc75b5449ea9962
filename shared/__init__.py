"""
Shared utilities for the Catalog service.

This package aggregates common building blocks consumed by the service
packages:

- config: Service configuration via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses
- base_service: FastAPI scaffolding (health, metrics, error handlers)

Do not import from service_* packages into shared/.
"""
