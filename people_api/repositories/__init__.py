"""
Persistence adapters.

Services and routers depend on these repositories rather than opening
SQLAlchemy sessions themselves.
"""
