# Routes package init
"""
JobTrail Backend — API Routes Package
=======================================

Route Inventory:
    - sync.py:          GET/POST /api/sync          (alias /sync)
    - resumes.py:       GET/POST /api/resume-sync   (alias /resumes)
    - auth.py:          POST /api/register, /api/login, /api/auth
    - applications.py:  /api/applications CRUD + restore
    - health.py:        GET /health

Routes stay thin: read the request, call one service, shape the response.
Errors are raised as JobTrailError subclasses and rendered by the global
handlers in main.py.
"""
