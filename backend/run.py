"""Start the analyzer API with uvicorn (port from CRA settings / PORT env)."""

import os

import uvicorn

from cra.config import get_settings

if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "backend.main:app",
        host=os.environ.get("CRA_HOST", "0.0.0.0"),
        port=settings.port,
        reload=os.environ.get("CRA_ENV", "development") == "development",
    )
