"""
Shared utilities for the TextTube services.

This package aggregates common building blocks consumed by all services:

- config: Service configuration via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics helpers
- observability: Request context, request/error/business-event logging
- errors: Canonical error types and responses
- base_service: FastAPI service skeleton shared by every service
- test_helpers: Test data factories, token generator and test configs

Any cross-service logic should live here to avoid import cycles across
service packages. Do not import from service_* packages into shared/.
"""
