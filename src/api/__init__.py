"""
API module for FastAPI routes.

Each route module defines a FastAPI APIRouter that is mounted on the
application in api.app.create_app().
"""
