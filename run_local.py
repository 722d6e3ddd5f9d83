#!/usr/bin/env python3
"""
Local development server runner.

Runs the FastAPI application using uvicorn for local development.

Usage:
    python run_local.py
    python run_local.py --port 4000
    python run_local.py --reload  # Auto-reload on code changes
"""

import argparse
import sys
from pathlib import Path

import uvicorn

project_root = Path(__file__).parent


def main():
    parser = argparse.ArgumentParser(
        description="Run the HookRelay application locally with uvicorn"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to run the server on (default: PORT setting, 4000)"
    )
    parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)"
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload on code changes"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="info",
        choices=["critical", "error", "warning", "info", "debug", "trace"],
        help="Log level for uvicorn (default: info)"
    )

    args = parser.parse_args()

    from pydantic import ValidationError
    from hookrelay.config.settings import get_settings

    try:
        settings = get_settings()
    except ValidationError as e:
        print("ERROR: invalid or missing configuration.")
        print("Required environment variables:")
        print("  - WEBHOOK_SECRET")
        print("Optional:")
        print("  - WEBHOOK_TARGET_URL (needed for /trigger)")
        print(e)
        sys.exit(1)

    port = args.port or settings.port

    print("=" * 60)
    print("Starting HookRelay (Local Development)")
    print("=" * 60)
    print(f"Server: http://{args.host}:{port}")
    print(f"Webhook receiver: http://{args.host}:{port}/webhook")
    print(f"Health: http://{args.host}:{port}/health")
    print("=" * 60)

    uvicorn.run(
        "hookrelay.main:app",
        host=args.host,
        port=port,
        reload=args.reload,
        log_level=args.log_level,
        reload_dirs=[str(project_root / "src")] if args.reload else None
    )


if __name__ == "__main__":
    main()
