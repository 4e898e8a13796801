"""
API module - FastAPI route handlers for the workflow host.

Includes:
- routes.py: selection lists, generation/chat batches, credential check
"""

from api.routes import router

__all__ = ["router"]
