"""
Web application package for the game controller.

Provides a FastAPI JSON API over one in-memory game. Run with:
    uvicorn web.app:app
"""
