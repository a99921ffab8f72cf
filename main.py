"""
Job queue server - main entry point.

Loads .env, configures logging and serves the FastAPI app with uvicorn.
Settings come from the environment (see src/infra/settings.py);
command-line flags override the bind address and log level.
"""

import argparse
import logging
import sys

import uvicorn
from dotenv import load_dotenv

from src.infra.logging_config import setup_logging
from src.infra.settings import load_settings


logger = logging.getLogger("src.main")


def parse_args():
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Job queue server - in-process job engine with retries",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Default: in-memory store, thread per job, 127.0.0.1:8000
  python main.py

  # SQLite store and a bounded worker pool
  JOBQUEUE_STORE=sqlite JOBQUEUE_MAX_WORKERS=4 python main.py --port 9000
        """
    )
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Bind host. Default: JOBQUEUE_HOST or 127.0.0.1"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Bind port. Default: JOBQUEUE_PORT or 8000"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level. Default: LOG_LEVEL or INFO"
    )
    return parser.parse_args()


def main() -> None:
    """Parse arguments, configure logging and run the API server."""
    load_dotenv()
    args = parse_args()

    try:
        settings = load_settings()
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        sys.exit(2)

    log_level = args.log_level or settings.log_level
    setup_logging(log_level, log_to_file=settings.log_to_file, log_dir=settings.log_dir)

    host = args.host or settings.host
    port = args.port or settings.port
    logger.info(f"Starting job queue server on {host}:{port}")

    uvicorn.run(
        "src.api.main:app",
        host=host,
        port=port,
        log_level=log_level.lower(),
    )


if __name__ == "__main__":
    main()
