"""
Proxy Package
=============

Declarative forwarding of marketplace API calls to the backend service.

Main Components:
----------------
- descriptor.py: ForwardRoute and its policies
- table.py: every forwarding route of the gateway
- forwarder.py: the one routine that executes a route
- routes.py: FastAPI router generated from the table

Usage:
------
    from gateway.app.proxy import proxy_router
    app.include_router(proxy_router, prefix="/api")
"""

from .routes import proxy_router

__all__ = ["proxy_router"]
