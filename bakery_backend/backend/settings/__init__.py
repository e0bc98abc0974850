# backend/settings/__init__.py
"""
PATH: backend/settings/__init__.py

Settings package entrypoint.

Nothing is imported here. Pick a concrete module with DJANGO_SETTINGS_MODULE:
- backend.settings.dev   (local development, sqlite)
- backend.settings.prod  (production, Postgres)
"""
