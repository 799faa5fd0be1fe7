"""
asgi.py -- ASGI entry point for Postboard.

Builds the application once from environment settings. This is the only
module that calls create_app() at import time.

Run with:  uvicorn asgi:app --reload
           python main.py serve
"""

from api.main import create_app

app = create_app()
