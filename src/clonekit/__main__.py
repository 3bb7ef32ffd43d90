"""Main entry point for clonekit.

Usage:
    python -m clonekit serve                    # Start the API server (default)
    python -m clonekit fields --template TPL-01 # List field definitions
    python -m clonekit --help                   # Show help
"""

import argparse
import sys
from pathlib import Path

from .logging_config import configure_logging


def _list_fields(template_id=None):
    from .cloning import FieldClassifier
    from .config_loader import get_field_definitions

    classifier = FieldClassifier(get_field_definitions())
    if template_id:
        definitions = classifier.definitions_for_template(template_id)
    else:
        definitions = list(classifier.definitions)

    for definition in definitions:
        templates = ", ".join(sorted(definition.template_ids)) or "*"
        print(f"{definition.id}\t{definition.category.value}\t{templates}")
    return 0


def main(argv=None):
    """Main CLI entry point for clonekit."""
    parser = argparse.ArgumentParser(
        prog="clonekit",
        description="clonekit - engagement cloning service",
    )
    parser.add_argument("--version", action="store_true", help="Show version and exit")
    parser.add_argument("--log-level", default=None, help="Log level (default: CLONEKIT_LOG_LEVEL or INFO)")
    parser.add_argument("--log-dir", type=Path, default=None, help="Log directory (default: CLONEKIT_LOG_DIR or ./logs)")
    parser.add_argument("--no-log-file", action="store_true", help="Log to the console only")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # 'serve' command - start the API server
    serve_parser = subparsers.add_parser("serve", help="Start the clonekit API server")
    serve_parser.add_argument(
        "--host", default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)"
    )
    serve_parser.add_argument(
        "--port", type=int, default=8000, help="Port to bind to (default: 8000)"
    )
    serve_parser.add_argument(
        "--reload", action="store_true", help="Enable auto-reload for development"
    )

    # 'fields' command - show the loaded field definition table
    fields_parser = subparsers.add_parser("fields", help="List field definitions")
    fields_parser.add_argument("--template", default=None, help="Only definitions applying to this template")

    args = parser.parse_args(argv)

    if args.version:
        from .version import __version__

        print(f"clonekit {__version__}")
        return 0

    logger = configure_logging(
        log_dir=args.log_dir,
        log_level=args.log_level,
        log_to_file=not args.no_log_file,
    )

    if args.command == "fields":
        return _list_fields(args.template)

    # Default to serve
    import uvicorn

    host = getattr(args, "host", "127.0.0.1")
    port = getattr(args, "port", 8000)
    logger.info(f"Starting clonekit API on {host}:{port}")
    uvicorn.run(
        "clonekit.api.app:app",
        host=host,
        port=port,
        reload=getattr(args, "reload", False),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
