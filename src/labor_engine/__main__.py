"""Entry point for running the application with uvicorn."""

import uvicorn

from labor_engine.config import settings


def main() -> None:
    """Run the application."""
    uvicorn.run(
        "labor_engine.api.app:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
