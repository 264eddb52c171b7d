"""
API Package - FastAPI Route Modules

Organized API endpoints for the AI analyst service.
Separates concerns between conversations and stateless chart extraction.
"""

from .conversations import router as conversations_router
from .charts import router as charts_router

__all__ = ['conversations_router', 'charts_router']
