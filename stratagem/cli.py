"""
Stratagem CLI - Run and inspect the API server.

Usage:
    stratagem serve [--host H] [--port P] [--reload]   Start the HTTP server
    stratagem routes                                   List registered routes
"""

import argparse
import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Stratagem - Abstract Strategy Games API",
        prog="stratagem",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Start the API server")
    serve_parser.add_argument("--host", help="Bind address (default from HOST)")
    serve_parser.add_argument("--port", type=int, help="Port (default from PORT)")
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    # Routes command
    subparsers.add_parser("routes", help="List registered routes")

    args = parser.parse_args(argv)

    if args.command == "serve":
        cmd_serve(args)
    elif args.command == "routes":
        cmd_routes(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_serve(args):
    """Start uvicorn with the settings from the environment."""
    import uvicorn

    from .config import Settings

    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    uvicorn.run(
        "stratagem.api.app:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )


def cmd_routes(args):
    """Print the method and path of every registered route."""
    from fastapi.routing import APIRoute

    from .api import create_app

    app = create_app()
    for route in app.routes:
        if not isinstance(route, APIRoute):
            continue
        for method in sorted(route.methods):
            print(f"{method:<7} {route.path}")


if __name__ == "__main__":
    main()
