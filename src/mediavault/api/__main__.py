"""
mediavault.api.__main__

`python -m mediavault.api` / `mediavault-api`: serve the API with uvicorn.

Host and port come from MEDIAVAULT_API_HOST / MEDIAVAULT_API_PORT unless given
on the command line.
"""

from __future__ import annotations

import argparse

import uvicorn

from mediavault.api.app import create_app
from mediavault.settings import get_settings


def main(argv: list[str] | None = None) -> None:
    settings = get_settings()

    parser = argparse.ArgumentParser(prog="mediavault-api")
    parser.add_argument("--host", default=settings.api_host)
    parser.add_argument("--port", type=int, default=settings.api_port)
    args = parser.parse_args(argv)

    # log_config=None leaves uvicorn's loggers to the structlog setup in create_app.
    uvicorn.run(create_app(settings=settings), host=args.host, port=args.port, log_config=None)


if __name__ == "__main__":
    main()
