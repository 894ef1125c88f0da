"""
JobBoard Backend - Application Package Initializer
===================================================

What: Marks the `jobboard` directory as a Python package.
Who:  Imported by uvicorn (`jobboard.main:app`), pytest and every internal module.

Architecture Note:
    The backend is a thin gatekeeper in front of a hosted database + auth
    service. Every externally reachable operation flows through the same layers:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Request Pipeline (rate → auth →   │  ← gating, first failure wins
    │          validation)                │
    ├─────────────────────────────────────┤
    │     Services (Domain Handlers)      │  ← one external call each
    ├─────────────────────────────────────┤
    │   Backend client (hosted service)   │  ← HTTP + error translation
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
