"""
Main entry point for the Assessment Workflow API.

Runs the FastAPI app with uvicorn using the host and port from settings.
Equivalent to: uvicorn api.main:app --host <API_HOST> --port <API_PORT>
"""

import argparse

import uvicorn

from config.settings import settings


def main():
    parser = argparse.ArgumentParser(description="Run the Assessment Workflow API")
    parser.add_argument("--host", default=settings.API_HOST, help="Bind address")
    parser.add_argument("--port", type=int, default=settings.API_PORT, help="Bind port")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes (development)")
    args = parser.parse_args()

    uvicorn.run("api.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
