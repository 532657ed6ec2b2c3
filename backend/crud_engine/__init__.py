"""
Generic CRUD resource-lifecycle engine.

Services sequence lookups, operation checks and lifecycle hooks around a
Repository; routers expose them over FastAPI.
"""
