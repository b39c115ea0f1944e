"""
asgi.py -- Todoboard ASGI entry point: the JSON API plus the HTML pages.

    uvicorn asgi:app --reload
"""

from api.main import app
from web.routes import router as web_router

app.include_router(web_router, tags=["Web UI"])
