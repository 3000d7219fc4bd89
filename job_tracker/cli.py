#!/usr/bin/env python3
"""CLI entry point for the job-tracker package."""
import argparse
from pathlib import Path

from .service import main as service_main
from .utils.config import config


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(prog="job-tracker", description="Track job applications locally.")
    parser.add_argument(
        "--storage",
        type=Path,
        default=None,
        help=f"Key-value store file (default: {config.storage_path})",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    service_main(storage_path=args.storage, debug=args.debug or None)


if __name__ == "__main__":
    main()
