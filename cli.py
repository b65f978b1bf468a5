#!/usr/bin/env python3
"""
Command-line interface for the smart store.

Usage:
    python cli.py [options] [command] [args]

Commands:
    run         Replay a command script file
    exec        Run a single command line
    serve       Start the API server

Examples:
    python cli.py run data/store.script
    python cli.py exec 'define store S1 name Main address "1 Main St"'
    python cli.py --token admin serve --reload
"""

import argparse
import logging
import subprocess
import sys

from config import Settings, configure_logging

logger = logging.getLogger("cli")


def build_processor(token: str):
    """Create a CommandProcessor over a fresh in-memory store."""
    from interpreter.command_processor import CommandProcessor
    from services.store_service import StoreService
    from storage.registry import StoreRegistry

    return CommandProcessor(StoreService(StoreRegistry()), token=token)


def run_script(path: str, token: str) -> int:
    """Replay a script file. Returns the process exit code."""
    processor = build_processor(token)
    result = processor.process_command_file(path)
    if result.io_error is not None:
        return 2

    print(f"\n{result.processed} commands, {result.succeeded} succeeded, {result.failed} failed")
    return 0 if result.failed == 0 else 1


def run_line(line: str, token: str) -> int:
    """Run a single command line."""
    processor = build_processor(token)
    return 0 if processor.execute(line) else 1


def run_server(settings: Settings, reload: bool) -> None:
    """Start the API server."""
    cmd = [
        sys.executable, "-m", "uvicorn", "api.main:app",
        f"--host={settings.host}", f"--port={settings.port}",
        f"--log-level={settings.log_level.lower()}",
    ]
    if reload:
        cmd.append("--reload")

    print(f"Starting server at http://{settings.host}:{settings.port}")
    print(f"API docs available at http://{settings.host}:{settings.port}/docs")
    subprocess.run(cmd)


def main() -> None:
    """Main CLI entry point."""
    settings = Settings.from_env()

    parser = argparse.ArgumentParser(
        description="Smart Store CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s run data/store.script
  %(prog)s exec 'show store S1'
  %(prog)s --log-level DEBUG run data/store.script
  %(prog)s serve --port 9000
        """,
    )
    parser.add_argument("--token", default=settings.token, help="Shared secret passed to the service")
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level (DEBUG, INFO, ...)")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Run command
    run_parser = subparsers.add_parser("run", help="Replay a command script file")
    run_parser.add_argument("script", help="Path to the script file")

    # Exec command
    exec_parser = subparsers.add_parser("exec", help="Run a single command line")
    exec_parser.add_argument("line", help="The command line, quoted")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Start the API server")
    serve_parser.add_argument("--host", default=settings.host, help="Host to bind to")
    serve_parser.add_argument("--port", type=int, default=settings.port, help="Port to bind to")
    serve_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")

    args = parser.parse_args()

    settings.token = args.token
    settings.log_level = args.log_level.upper()
    configure_logging(settings.log_level)

    if args.command == "run":
        sys.exit(run_script(args.script, settings.token))
    elif args.command == "exec":
        sys.exit(run_line(args.line, settings.token))
    elif args.command == "serve":
        settings.host = args.host
        settings.port = args.port
        run_server(settings, args.reload)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
