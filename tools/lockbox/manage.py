#!/usr/bin/env python3
"""CLI for registering users and checking logins against the local store.

Provides commands to:
- Register users (password prompted twice when not given)
- Check a username/password pair
- List registered users with their creation time
"""

import argparse
import getpass
import logging
import sys
from typing import List, Optional

from lockbox.auth.hasher import CredentialHasher
from lockbox.auth.service import AuthResult, AuthService
from lockbox.auth.store import UserStore
from lockbox.auth.validator import Validator
from lockbox.config import DEFAULT_CONFIG_PATH, load_config
from lockbox.errors import ConfigError, HashError, StoreError

logger = logging.getLogger("lockbox.manage")


def register(args, service: AuthService) -> int:
    """Register a new user with optional password prompt."""
    username = args.username.strip()

    if args.password:
        password = args.password
    else:
        password = getpass.getpass(f"Password for {username}: ")
        confirm = getpass.getpass("Confirm password: ")
        if password != confirm:
            print("Error: Passwords do not match", file=sys.stderr)
            return 1

    error = service.register(username, password)
    if error is not None:
        print(f"Error: {error.message}", file=sys.stderr)
        return 1

    print(f"✓ User registered: {username}")
    return 0


def login(args, service: AuthService) -> int:
    """Check a username/password pair."""
    username = args.username.strip()
    password = args.password or getpass.getpass(f"Password for {username}: ")

    if service.login(username, password) is AuthResult.SUCCESS:
        print(f"✓ Login successful: {username}")
        return 0

    print("Error: Invalid credentials", file=sys.stderr)
    return 1


def list_users(args, service: AuthService) -> int:
    """List all users with their creation time."""
    users = service.store.list_users()

    if not users:
        print("No users found")
        return 0

    print(f"{'Username':<24} {'Created':<20}")
    print("-" * 45)

    for user in users:
        created = user.created_at.strftime("%Y-%m-%d %H:%M:%S")
        print(f"{user.username:<24} {created:<20}")

    print(f"\nTotal: {len(users)}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lockbox",
        description="Register and authenticate users against a local credential store",
    )
    parser.add_argument(
        "--config",
        "-c",
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to config.json (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "--db-path",
        help="Path to SQLite database (overrides config)",
    )
    parser.add_argument(
        "--log-level",
        "-l",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    register_parser = subparsers.add_parser("register", help="Register a new user")
    register_parser.add_argument("--username", required=True, help="Username")
    register_parser.add_argument("--password", help="Password (prompted if omitted)")

    login_parser = subparsers.add_parser("login", help="Check a login")
    login_parser.add_argument("--username", required=True, help="Username")
    login_parser.add_argument("--password", help="Password (prompted if omitted)")

    subparsers.add_parser("list-users", help="List all users")

    return parser


COMMANDS = {
    "register": register,
    "login": login,
    "list-users": list_users,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    db_path = args.db_path or config.db_path
    try:
        store = UserStore.open(db_path)
    except StoreError as e:
        logger.error(f"Cannot open user store: {e}")
        print(f"Error: Cannot open user store at {db_path}", file=sys.stderr)
        return 1

    try:
        hasher = CredentialHasher(config.hasher)
    except HashError as e:
        logger.error(f"Cannot initialize password hasher: {e}")
        print("Error: Password hashing unavailable", file=sys.stderr)
        store.close()
        return 1

    service = AuthService(store, hasher=hasher, validator=Validator(config.policy))

    try:
        return COMMANDS[args.command](args, service)
    except StoreError as e:
        logger.error(f"Store error running {args.command}: {e}")
        print("Error: User store unavailable", file=sys.stderr)
        return 1
    finally:
        store.close()


if __name__ == "__main__":
    sys.exit(main())
