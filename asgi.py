"""
asgi.py -- ASGI entry point for bootcamp-auth.

Run with:  uvicorn asgi:app --reload
           python main.py serve

Kept separate from api/main.py so process managers point at one stable
module path no matter how the api/ package is laid out.
"""

from api.main import app

__all__ = ["app"]
