"""
Start the Form Portal approval API with uvicorn.

A single process is started: the reconciliation job runs inside it when
SCHEDULER_ENABLED is set, so extra workers would run duplicate jobs.

Usage:
    python run.py
    python run.py --reload --port 8080
"""
import argparse
import uvicorn

from formportal.config.settings import settings


def main():
    parser = argparse.ArgumentParser(description="Form Portal approval API")
    parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    parser.add_argument("--port", type=int, default=8000, help="Bind port")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    args = parser.parse_args()

    print(f"Form Portal approval API on http://{args.host}:{args.port} ({settings.environment})")

    uvicorn.run(
        "formportal.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
