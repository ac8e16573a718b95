#!/usr/bin/env python3
"""
College Tours API -- development server launcher.

Usage:
  python main.py
  python main.py --port 8080
  python main.py --host 0.0.0.0 --port 3000 --reload

Environment variables (see core/config.py for the full list):
  SECRET_KEY       Token signing secret, at least 32 characters. Required
                   unless DEBUG=true.
  DEBUG            true to auto-generate a secret and show server error detail.
  DATABASE_URL     SQLAlchemy URL. Defaults to a SQLite file in the repo root.
  ADMIN_EMAILS     JSON list of emails allowed through the admin gate.
  AUTH_DEV_BYPASS  true to treat token-less requests as 'dev-user' (DEBUG only).
"""

import argparse

import uvicorn


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="college-tours",
        description="Run the College Tours API under uvicorn.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--host", default="127.0.0.1", help="Interface to bind (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=3000, help="Port to listen on (default: 3000)")
    parser.add_argument("--reload", action="store_true", help="Restart the server when source files change")
    parser.add_argument(
        "--log-level",
        choices=["critical", "error", "warning", "info", "debug"],
        default="info",
        help="uvicorn log level (default: info)",
    )
    args = parser.parse_args()

    uvicorn.run("asgi:app", host=args.host, port=args.port, reload=args.reload, log_level=args.log_level)


if __name__ == "__main__":
    main()
