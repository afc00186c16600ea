"""FastAPI routers for the worker.

Routers are grouped by concern (explain, system).
"""
