#!/usr/bin/env python3
"""
Appliance Tracker -- register appliances and their energy consumption over HTTP.

Usage:
  python main.py
  python main.py --port 8080
  python main.py --host 127.0.0.1 --reload

Environment variables (or .env):
  SECRET_KEY            Token signing key, at least 32 characters. Required unless DEBUG=true.
  DEBUG                 true to auto-generate a throwaway SECRET_KEY for local development.
  DATABASE_URL          SQLAlchemy URL. Default: sqlite:///banco-de-dados.db
  INVALID_TOKEN_STATUS  Status for a bad/expired bearer token. Default: 500
"""

import argparse

import uvicorn

from core.config import get_settings


def main() -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        description="Appliance Tracker API server.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--host", default=settings.host, help=f"Bind address (default: {settings.host})")
    parser.add_argument("--port", type=int, default=settings.port, help=f"Listen port (default: {settings.port})")
    parser.add_argument("--reload", action="store_true", help="Restart on code changes (development only)")
    args = parser.parse_args()

    print(f"  Server running at http://localhost:{args.port}")
    uvicorn.run(
        "api.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
