"""Entry point: `clipsplice [--host HOST] [--port PORT]` runs the API under uvicorn."""

import argparse
import logging
from dataclasses import replace

import uvicorn

from clipsplice.config import load_settings
from clipsplice.main import create_app


def main() -> None:
    settings = load_settings()

    parser = argparse.ArgumentParser(
        prog="clipsplice",
        description="HTTP service that downloads a video and cuts it into clips.",
    )
    parser.add_argument("--host", type=str, default=settings.host, help="Host to bind to (env HOST)")
    parser.add_argument("--port", type=int, default=settings.port, help="Port to listen on (env PORT)")
    args = parser.parse_args()

    settings = replace(settings, host=args.host, port=args.port)
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = create_app(settings)
    logging.getLogger(__name__).info("Server is running on port %d", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
