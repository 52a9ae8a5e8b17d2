"""
PapyrusDB CLI - set up and run your personal Papyrus sync server.

Usage:
    papyrusdb init [--env-file PATH] [--force]
    papyrusdb serve [--host HOST] [--port PORT] [--reload] [--env-file PATH]
    papyrusdb migrate [--env-file PATH]
    papyrusdb genkey
"""

import argparse
import sys

from dotenv import load_dotenv
from pydantic import ValidationError as SettingsError

from ..auth import generate_server_key
from ..config import get_settings
from ..errors import StoreError
from ..logging_config import configure_logging
from .commands import cmd_init, cmd_migrate


def _load_settings(env_file: str | None = None):
    """Settings, or None with a hint when the server was never configured."""
    if env_file:
        load_dotenv(env_file, override=True)
        get_settings.cache_clear()
    try:
        return get_settings()
    except SettingsError:
        print("✗ PAPYRUS_SERVER_KEY is not set: the server has not been configured yet.")
        print("  Run `papyrusdb init` to create a .env file.")
        return None


def cmd_serve(args) -> int:
    """Run the API with uvicorn."""
    settings = _load_settings(args.env_file)
    if settings is None:
        return 1

    import uvicorn

    host = args.host or settings.host
    port = args.port or settings.port
    configure_logging("DEBUG" if settings.debug else settings.log_level)
    print(f"\nPapyrusDB listening on http://{host}:{port}")
    print(f"Server key: {settings.masked_key()} (keep it secret)\n")
    uvicorn.run(
        "papyrusdb.main:app",
        host=host,
        port=port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )
    return 0


def cmd_genkey(args) -> int:
    """Print a fresh server key."""
    print(generate_server_key())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="papyrusdb",
        description="Personal sync server for the Papyrus notes app",
    )
    subparsers = parser.add_subparsers(dest="command")

    p_init = subparsers.add_parser("init", help="Interactive setup (writes .env)")
    p_init.add_argument("--env-file", default=".env", help="Where to write settings")
    p_init.add_argument("--force", action="store_true", help="Overwrite an existing file")

    p_serve = subparsers.add_parser("serve", help="Start the API server")
    p_serve.add_argument("--host", help="Bind address (default: from settings)")
    p_serve.add_argument("--port", type=int, help="Port (default: from settings)")
    p_serve.add_argument("--reload", action="store_true", help="Auto-reload on code change")
    p_serve.add_argument("--env-file", help="Load settings from this file first")

    p_migrate = subparsers.add_parser("migrate", help="Apply store migrations now")
    p_migrate.add_argument("--env-file", help="Load settings from this file first")
    subparsers.add_parser("genkey", help="Print a new random server key")

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "init":
        return cmd_init(args)
    if args.command == "serve":
        return cmd_serve(args)
    if args.command == "genkey":
        return cmd_genkey(args)
    if args.command == "migrate":
        settings = _load_settings(args.env_file)
        if settings is None:
            return 1
        configure_logging(settings.log_level)
        try:
            return cmd_migrate(args, settings)
        except StoreError as e:
            print(f"✗ {e}")
            return 1

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
