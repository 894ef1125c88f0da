# Middleware package init
"""
JobBoard Backend - Middleware Package
======================================

Two kinds of cross-cutting code live here:

ASGI middleware, applied to every request:
    Request → [Request ID] → [Access Log] → [GZip] → [CORS] → Route

Gating components, composed per route by jobboard.pipeline:
    rate_limit.py  fixed-window limiter over a pluggable store
    auth.py        bearer token verification and the admin tier
"""
