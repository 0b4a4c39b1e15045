"""Serve the local car catalog API (/car CRUD) for client development."""
import logging
import uvicorn

from carcatalog.config import API_HOST, API_PORT

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    uvicorn.run(
        "carcatalog.api.app:app",
        host=API_HOST,
        port=API_PORT,
        reload=True,
    )
