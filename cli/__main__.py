#!/usr/bin/env python3
"""
otaccounts CLI - command-line interface for managing game accounts.

Usage:
    python -m cli <command> <subcommand> [options]

Commands:
    accounts     Manage accounts
    migrate      Database migrations

Examples:
    python -m cli accounts list
    python -m cli accounts create --type 2 --email player@example.com
    python -m cli accounts show player
    python -m cli accounts set-premdays player 30
    python -m cli migrate status
    python -m cli migrate apply
"""

import sys
import argparse
from cli import accounts, migrate
from config import load_config
from services.base import Services
from db.manager import DatabaseManager
from logger import setup_logging


def main():
    """Main CLI entry point with subcommands."""
    parser = argparse.ArgumentParser(
        prog="cli",
        description="otaccounts - Game server account management",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
        required=True,
    )

    accounts.setup_parser(subparsers)
    migrate.setup_parser(subparsers)

    args = parser.parse_args()

    if hasattr(args, "func"):
        try:
            config = load_config()
            setup_logging(config)

            # accounts goes through services, migrate needs raw connections
            if args.command == "accounts":
                services = Services(config)
                try:
                    args.func(args, services)
                finally:
                    services.close()
            elif args.command == "migrate":
                db_manager = DatabaseManager(config)
                try:
                    args.func(args, db_manager)
                finally:
                    db_manager.dispose()
            else:
                args.func(args)
        except Exception as e:
            print(f"Error: {e}")
            sys.exit(1)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
