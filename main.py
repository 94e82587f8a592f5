"""Random Tables launcher. Serves the MCP server (stdio) or the HTTP API."""

import argparse
import logging
import sys
from pathlib import Path

from random_tables.config import Settings, build_services
from random_tables.errors import ConfigError


def main():
    parser = argparse.ArgumentParser(description="Random Tables server")
    parser.add_argument("mode", nargs="?", choices=["mcp", "http"], default="mcp",
                        help="Transport: MCP over stdio (default) or the HTTP API")
    parser.add_argument("--data-dir", type=Path, default=None,
                        help="Data storage directory (default: DATA_DIR or ./data)")
    parser.add_argument("--demo", action="store_true",
                        help="Clean and create demo tables and templates")
    args = parser.parse_args()

    try:
        settings = Settings.from_env()
    except ConfigError as e:
        print(e, file=sys.stderr)
        sys.exit(2)
    if args.data_dir:
        settings = settings.model_copy(update={"data_dir": args.data_dir.resolve()})

    # stdout carries the MCP protocol, so logs always go to stderr
    logging.basicConfig(
        level=settings.log_level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    services = build_services(settings)
    if args.demo:
        from random_tables.demo import create_demo_data
        create_demo_data(services)

    if args.mode == "http":
        import uvicorn

        from random_tables.app import create_app
        print(f"Starting API on http://{settings.host}:{settings.port} ...", file=sys.stderr)
        uvicorn.run(create_app(services), host=settings.host, port=settings.port)
    else:
        from random_tables.mcp_server import run
        run(settings, services)


if __name__ == "__main__":
    main()
