"""
API Route modules.

- upload: lab report upload and triage
"""

from backend.api.upload import router as upload_router

__all__ = [
    'upload_router',
]
