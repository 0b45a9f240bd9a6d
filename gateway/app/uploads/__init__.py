"""
Uploads package: image hosting, local document storage, and the upload routes.
"""

from .routes import uploads_router

__all__ = ["uploads_router"]
