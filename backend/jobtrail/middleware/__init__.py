# Middleware package init
"""
JobTrail Backend — Middleware Package
=======================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    Request ID runs first so the access log line and any error body carry
    the same id. Auth attempt limiting is not in this chain: it applies only
    to the auth routes, as a dependency (see rate_limit.py).
"""
