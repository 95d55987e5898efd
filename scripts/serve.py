"""
Run the dashboard API.

Example:
    python -m scripts.serve --reload
"""

from __future__ import annotations

import argparse

import uvicorn

from agent_dashboard.config import settings


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the dashboard API server.")
    parser.add_argument("--host", default=settings.app_host)
    parser.add_argument("--port", type=int, default=settings.app_port)
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    args = parser.parse_args()

    uvicorn.run("agent_dashboard.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
