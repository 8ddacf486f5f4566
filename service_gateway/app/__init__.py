"""
API Gateway Service package for TextTube.

The gateway fronts client requests, enforcing authentication via the Auth
service before dispatching to the Video metadata service.

Structure:
- app.main: FastAPI app, routes, and middleware wiring.
- app.adapters: HTTP clients for internal services.
- app.domain: Cross-cutting domain helpers (auth middleware).
"""
