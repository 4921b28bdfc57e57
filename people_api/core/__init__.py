"""
Core utilities shared across the People API.

This package hosts configuration, logging setup, the tag-invalidated cache
and the request-scoped memo table. Repositories and routers depend on these
primitives instead of reading os.environ or keeping module-level caches.
"""
