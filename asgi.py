"""
asgi.py -- ASGI entry point for MedAI.

Run with:  uvicorn asgi:app --reload
           python main.py serve

Hosting platforms point their start command here so the import path stays
stable if api/ is reorganized.
"""

from api.main import app

__all__ = ["app"]
