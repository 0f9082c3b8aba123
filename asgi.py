"""
asgi.py -- Application assembly for the RIM directory.

Importing this module reads Vault and connects to PostgreSQL and Valkey.
Tests build the app through main.create_app() instead.

Run with:  uvicorn asgi:app
"""

from main import build_app

app = build_app()
