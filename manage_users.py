#!/usr/bin/env python3
"""
User management CLI for PhotoShare.
Run this script to add, modify, or remove users.

Usage:
    python manage_users.py add <username> <email> <password> [USER|MODERATOR|ADMIN]
    python manage_users.py list
    python manage_users.py delete <username>
    python manage_users.py role <username> <USER|MODERATOR|ADMIN>
    python manage_users.py enable <username>
    python manage_users.py disable <username>
    python manage_users.py passwd <username> <new_password>
"""

import asyncio
import logging
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from photoshare import config
from photoshare.database import create_connection, init_db
from photoshare.exceptions import PhotoShareError
from photoshare.logging_config import configure_logging
from photoshare.models import Principal, Role
from photoshare.routes.deps import get_user_service
from photoshare.infrastructure.repositories import UserRepository

logger = logging.getLogger("photoshare.cli")

# Operator acting from the shell; not a row in the users table
CLI_ACTOR = Principal(id=0, username="manage_users", role=Role.ADMIN)


def print_usage():
    print(__doc__)


def _find(db, username):
    user = UserRepository(db).get_by_username(username)
    if not user:
        print(f"Error: User '{username}' not found")
    return user


def cmd_add(db, args):
    if len(args) < 3:
        print("Error: add requires <username> <email> <password> [role]")
        print("Example: python manage_users.py add alice alice@example.com s3cretpass")
        return 1

    username, email, password = args[0], args[1], args[2]
    role = Role.parse(args[3]) if len(args) > 3 else Role.USER

    principal = get_user_service(db).register(username, email, password, role=role)
    print(f"User '{principal.username}' created successfully (ID: {principal.id}, role: {role.value})")
    return 0


def cmd_list(db, args):
    users = get_user_service(db).list_users()
    if not users:
        print("No users found. Create one with: python manage_users.py add <username> <email> <password>")
        return 0

    print(f"{'ID':<5} {'Username':<20} {'Email':<30} {'Role':<10} {'Enabled':<8} {'Created'}")
    print("-" * 95)
    for user in users:
        enabled = "yes" if user['enabled'] else "no"
        print(f"{user['id']:<5} {user['username']:<20} {user['email']:<30} "
              f"{user['role']:<10} {enabled:<8} {user['created_at']}")
    return 0


def cmd_delete(db, args):
    if len(args) < 1:
        print("Error: delete requires <username>")
        return 1

    username = args[0]
    user = _find(db, username)
    if not user:
        return 1

    # Confirm deletion
    confirm = input(f"Delete user '{username}' and all their photos? [y/N]: ")
    if confirm.lower() != 'y':
        print("Cancelled")
        return 0

    asyncio.run(get_user_service(db).delete_user(CLI_ACTOR, user['id']))
    print(f"User '{username}' deleted")
    return 0


def cmd_role(db, args):
    if len(args) < 2:
        print("Error: role requires <username> <role>")
        return 1

    username, role = args[0], Role.parse(args[1])
    user = _find(db, username)
    if not user:
        return 1

    UserRepository(db).set_role(user['id'], role)
    logger.info("Role of %s set to %s from CLI", username, role.value)
    print(f"Role for '{username}' changed to {role.value}")
    return 0


def _set_enabled(db, args, enabled):
    if len(args) < 1:
        print(f"Error: {'enable' if enabled else 'disable'} requires <username>")
        return 1

    username = args[0]
    user = _find(db, username)
    if not user:
        return 1

    UserRepository(db).set_enabled(user['id'], enabled)
    logger.info("User %s %s from CLI", username, "enabled" if enabled else "disabled")
    print(f"User '{username}' {'enabled' if enabled else 'disabled'}")
    return 0


def cmd_passwd(db, args):
    if len(args) < 2:
        print("Error: passwd requires <username> <new_password>")
        return 1

    username, new_password = args[0], args[1]
    user = _find(db, username)
    if not user:
        return 1

    get_user_service(db).reset_password(user['id'], new_password)
    print(f"Password updated for '{username}'")
    return 0


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) < 1:
        print_usage()
        return 1

    configure_logging(config.LOG_LEVEL)

    command = argv[0].lower()
    args = argv[1:]

    commands = {
        'add': cmd_add,
        'list': cmd_list,
        'delete': cmd_delete,
        'role': cmd_role,
        'enable': lambda db, a: _set_enabled(db, a, True),
        'disable': lambda db, a: _set_enabled(db, a, False),
        'passwd': cmd_passwd,
        'help': lambda db, a: (print_usage(), 0)[1],
    }

    if command not in commands:
        print(f"Unknown command: {command}")
        print_usage()
        return 1

    # Initialize database
    config.DATABASE_PATH.parent.mkdir(parents=True, exist_ok=True)
    db = create_connection()
    try:
        init_db(db)
        return commands[command](db, args)
    except PhotoShareError as e:
        print(f"Error: {e}")
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
