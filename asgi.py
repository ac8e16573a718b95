"""
asgi.py -- Application assembly for the College Tours API.

Builds the production app from environment configuration (core.config). Tests
do not import this module; they call api.main.create_app() with their own
Settings.

Run with:  uvicorn asgi:app --reload
           python main.py
"""

from api.main import create_app

app = create_app()
