"""Entrypoint to run the FastAPI API server.

Example:
    python -m scripts.run_api
    python scripts/run_api.py --host 0.0.0.0 --port 8000 --reload
"""

from __future__ import annotations

import argparse
import sys
from typing import Optional

import uvicorn
from loguru import logger

from chronos_guru.helpers.logging_helpers import add_console_verbosity, configure_logger


def _port(value: str) -> int:
    """Validate and return a TCP port.

    Raises:
        argparse.ArgumentTypeError: If the value is not an integer in [1, 65535].
    """
    try:
        port = int(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError("port must be an integer") from e
    if not (1 <= port <= 65535):
        raise argparse.ArgumentTypeError("port must be between 1 and 65535")
    return port


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments for the API runner."""
    parser = argparse.ArgumentParser(description="Chronos Guru API runner")

    parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Host interface to bind the API server to (default: 127.0.0.1).",
    )
    parser.add_argument(
        "--port",
        type=_port,
        default=8000,
        help="Port to run the API server on (default: 8000).",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development.",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Number of worker processes (ignored when --reload is set).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase console verbosity: -v for INFO, -vv for DEBUG.",
    )
    return parser.parse_args(argv)


def _effective_workers(reload: bool, requested_workers: int) -> Optional[int]:
    """Compute the effective worker count for uvicorn.

    Notes:
        Sessions live in process memory, so more than one worker splits them
        across processes; keep 1 unless clients only use stateless routes.
    """
    if reload:
        if requested_workers != 1:
            logger.warning("--reload implies a single process; ignoring --workers")
        return None
    if requested_workers < 1:
        logger.warning("workers must be >= 1; forcing workers=1")
        return 1
    return requested_workers


def run(args: argparse.Namespace) -> int:
    """Run the FastAPI app with the provided arguments.

    Returns:
        Exit code: 0 on clean shutdown, 130 on SIGINT, 1 on error.
    """
    try:
        workers = _effective_workers(args.reload, args.workers)
        logger.info(
            f"Starting API ({args.host}:{args.port}) "
            f"(reload={args.reload}, workers={workers if workers else 1})"
        )
        config = uvicorn.Config(
            "chronos_guru.api.main:app",
            host=args.host,
            port=args.port,
            reload=args.reload,
            workers=workers,
            # Hand logging to Loguru; avoid uvicorn's default dictConfig
            log_config=None,
        )
        server = uvicorn.Server(config)
        server.run()
        return 0
    except KeyboardInterrupt:
        logger.info("Received interrupt. Shutting down...")
        return 130
    except Exception:
        logger.exception("API server crashed")
        return 1


def main() -> None:
    """Parse args, configure logging and exit with the code from `run(args)`."""
    args = parse_args()

    try:
        configure_logger(source="api")
    except Exception as e:
        logger.warning(f"Failed to configure logger; using default logger. ({e})")

    add_console_verbosity(args.verbose)

    code = run(args)
    sys.exit(code)


if __name__ == "__main__":
    main()
