"""External interfaces.

- WebAPI: FastAPI JSON API over the event store (token login, budget
  summaries, link reconciliation, budget and partner mutations)

Usage:
    ```python
    from interface import create_app

    app = create_app(db, username="admin", password="secret")
    uvicorn.run(app, port=8080)
    ```
"""
from interface.web.app import WebAPI, create_app

__all__ = [
    "WebAPI",
    "create_app",
]
