#!/usr/bin/env python3

import sys
from getpass import getpass

from exceptions import AccountError
from logger import get_logger
from models.account import Account
from models.criteria import criteria_for

logger = get_logger()


def parse_account_ref(value: str):
    """Turn a command line reference into criteria: digits are ids, anything else a name."""
    if value.isdigit():
        return criteria_for(int(value))
    return criteria_for(value)


def log_account(account: Account):
    logger.info(f"ID: {account.id}")
    logger.info(f"Name: {account.name}")
    logger.info(f"Type: {account.type}")
    logger.info(f"Premium days: {account.premdays}")
    logger.info(f"Last day: {account.lastday}")
    logger.info(f"Email: {account.email}")
    logger.info(f"Created: {account.creation}")


def find_or_exit(services, ref: str) -> Account:
    account = services.accounts.find_one(parse_account_ref(ref))
    if account is None:
        logger.error(f"Account '{ref}' not found.")
        sys.exit(1)
    return account


def cmd_list(args, services):
    """List all accounts in the database."""
    accounts = services.accounts.find_all()

    if not accounts:
        logger.info("No accounts found.")
        return

    logger.info("\nAccounts:")
    logger.info("=" * 80)
    for account in accounts:
        log_account(account)
        logger.info("-" * 80)

    logger.info(f"\nTotal accounts: {len(accounts)}")


def cmd_show(args, services):
    """Show a single account."""
    log_account(find_or_exit(services, args.account))


def cmd_create(args, services):
    """Interactively create a new account."""
    print("\nCreate New Account")
    print("=" * 80)

    name = input("Account name: ").strip()
    password = getpass("Password: ")
    if password != getpass("Repeat password: "):
        logger.error("Passwords do not match.")
        sys.exit(1)

    try:
        account = Account.create(name, password)
        account.type = args.type
        account.premdays = args.premdays
        account.email = args.email

        if services.accounts.find_one(criteria_for(name)) is not None:
            logger.error(f"Account '{name}' already exists.")
            sys.exit(1)

        services.accounts.save(account)
        logger.info(f"\n✓ Account created successfully with ID: {account.id}")
        log_account(account)

    except AccountError as e:
        logger.error(f"Error creating account: {e}")
        sys.exit(1)


def cmd_delete(args, services):
    """Delete an account."""
    account = find_or_exit(services, args.account)
    result = services.accounts.delete(account)
    logger.info(f"Deleted {result.affected_rows} account(s).")


def cmd_set_premdays(args, services):
    """Set the premium days of an account."""
    account = find_or_exit(services, args.account)
    try:
        account.premdays = args.days
        services.accounts.save(account)
    except AccountError as e:
        logger.error(f"Error updating account: {e}")
        sys.exit(1)
    logger.info(f"Account '{account.name}' now has {account.premdays} premium day(s).")


def setup_parser(subparsers):
    """Setup accounts subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "accounts",
        help="Manage accounts",
        description="Create, inspect and delete accounts",
    )

    accounts_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available account commands",
        dest="subcommand",
        required=True,
    )

    # accounts list
    list_parser = accounts_subparsers.add_parser("list", help="List all accounts")
    list_parser.set_defaults(func=cmd_list)

    # accounts show
    show_parser = accounts_subparsers.add_parser("show", help="Show an account")
    show_parser.add_argument("account", help="Account id or name")
    show_parser.set_defaults(func=cmd_show)

    # accounts create
    create_parser = accounts_subparsers.add_parser(
        "create", help="Create a new account interactively"
    )
    create_parser.add_argument("--type", type=int, default=1, help="Account type (1-5)")
    create_parser.add_argument(
        "--premdays", type=int, default=0, help="Premium days (0-65535)"
    )
    create_parser.add_argument("--email", default="", help="Contact email")
    create_parser.set_defaults(func=cmd_create)

    # accounts delete
    delete_parser = accounts_subparsers.add_parser("delete", help="Delete an account")
    delete_parser.add_argument("account", help="Account id or name")
    delete_parser.set_defaults(func=cmd_delete)

    # accounts set-premdays
    premdays_parser = accounts_subparsers.add_parser(
        "set-premdays", help="Set the premium days of an account"
    )
    premdays_parser.add_argument("account", help="Account id or name")
    premdays_parser.add_argument("days", type=int, help="Premium days (0-65535)")
    premdays_parser.set_defaults(func=cmd_set_premdays)
