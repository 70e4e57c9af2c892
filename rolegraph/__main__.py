"""Run the API with uvicorn: ``python -m rolegraph``."""

import uvicorn

from rolegraph.core.config import get_settings

if __name__ == "__main__":  # pragma: no cover
    settings = get_settings()
    uvicorn.run("rolegraph.main:app", host=settings.api_host, port=settings.api_port)
