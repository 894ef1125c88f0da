# Routes package init
"""
JobBoard Backend - API Routes Package
======================================

Route Inventory:
    - jobs.py:    GET/POST/PUT/DELETE /api/jobs, GET /api/jobs/mine
    - admin.py:   GET/DELETE /api/admin/users, GET /api/admin/overview
    - auth.py:    POST /api/auth/{signup,login,admin/login,password-reset,password-strength},
                  GET /api/auth/me
    - health.py:  GET /health

Routes stay thin: the pipeline dependency gates the request, the service
does the work, the global exception handlers shape every error body.
"""
