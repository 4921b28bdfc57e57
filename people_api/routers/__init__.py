"""
FastAPI routers grouped by domain.

Each module exposes an APIRouter that the app factory (app.py) includes.
Routers resolve their service from ``app.state`` and translate failures into
HTTP status codes.
"""
