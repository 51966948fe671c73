#!/usr/bin/env python3
"""
Database Maintenance CLI

Seeds or clears the primary and/or secondary database directly, one target
at a time (no failover: each command goes exactly where it is pointed).

Usage:
    python -m ticketdesk.maintenance seed
    python -m ticketdesk.maintenance clear --target secondary

Exit codes: 0 on success, 1 on configuration or connection failure, 130 when
interrupted.
"""

import argparse
import asyncio
import random
import sys
from datetime import timedelta
from typing import Any

from ticketdesk.application.services.auth_service import hash_password
from ticketdesk.core.config.constants import (
    COLLECTION_AUDIT_LOGS,
    COLLECTION_COMMENTS,
    COLLECTION_TICKET_HISTORY,
    COLLECTION_TICKETS,
    COLLECTION_USERS,
    AuditAction,
    DatabaseRole,
    TicketStatus,
    UserRole,
)
from ticketdesk.core.config.settings import Settings, get_settings
from ticketdesk.core.exceptions import TicketDeskError
from ticketdesk.core.logging.logger import get_logger, setup_logging
from ticketdesk.infrastructure.database.establisher import ConnectionEstablisher
from ticketdesk.infrastructure.database.repositories import utc_now
from ticketdesk.infrastructure.database.targets import TargetRegistry

logger = get_logger(__name__)


# ============================================================================
# Sample Data
# ============================================================================

SAMPLE_USERS = [
    {"name": "Admin User", "email": "admin@example.com", "password": "admin123", "role": UserRole.ADMIN},
    {"name": "John Doe", "email": "john@example.com", "password": "user123", "role": UserRole.USER},
    {"name": "Jane Smith", "email": "jane@example.com", "password": "user123", "role": UserRole.USER},
    {"name": "Bob Johnson", "email": "bob@example.com", "password": "user123", "role": UserRole.USER},
    {"name": "Alice Brown", "email": "alice@example.com", "password": "user123", "role": UserRole.USER},
    {"name": "Charlie Wilson", "email": "charlie@example.com", "password": "user123", "role": UserRole.USER},
    {"name": "Diana Davis", "email": "diana@example.com", "password": "user123", "role": UserRole.USER},
    {"name": "Support Admin", "email": "support@example.com", "password": "admin123", "role": UserRole.ADMIN},
]

SAMPLE_TICKETS = [
    ("Login Issues", "I cannot log into my account. The password reset is not working.", TicketStatus.OPEN),
    ("Payment Processing Error",
     "My payment was declined but my bank shows the charge. Please help resolve this.", TicketStatus.CLOSED),
    ("Feature Request: Dark Mode",
     "It would be great to have a dark mode option for the application.", TicketStatus.OPEN),
    ("Bug Report: Dashboard Loading",
     "The dashboard takes too long to load and sometimes shows a blank page.", TicketStatus.OPEN),
    ("Account Deletion Request",
     "I would like to delete my account and all associated data.", TicketStatus.CLOSED),
    ("Email Notifications Not Working",
     "I am not receiving email notifications for ticket updates.", TicketStatus.OPEN),
    ("Mobile App Crashes", "The mobile app crashes when I try to upload files.", TicketStatus.OPEN),
    ("Billing Question", "I have a question about my monthly billing cycle and charges.", TicketStatus.CLOSED),
    ("API Documentation Request",
     "Could you provide more detailed API documentation with examples?", TicketStatus.OPEN),
    ("Security Concern",
     "I noticed some suspicious activity on my account. Please investigate.", TicketStatus.CLOSED),
]

SAMPLE_AUDIT_ACTIONS = [
    AuditAction.LOGIN,
    AuditAction.CREATE_TICKET,
    AuditAction.UPDATE_TICKET,
    AuditAction.DELETE_TICKET,
    AuditAction.VIEW_TICKETS,
]

SAMPLE_AUDIT_LOG_COUNT = 50

CLEARED_COLLECTIONS = [
    COLLECTION_USERS,
    COLLECTION_TICKETS,
    COLLECTION_COMMENTS,
    COLLECTION_TICKET_HISTORY,
    COLLECTION_AUDIT_LOGS,
]


# ============================================================================
# Operations
# ============================================================================


async def clear_database(database) -> dict[str, int]:
    """
    Delete every document the application owns.

    Returns:
        Deleted document count per collection
    """
    deleted = {}
    for name in CLEARED_COLLECTIONS:
        result = await database[name].delete_many({})
        deleted[name] = result.deleted_count
    return deleted


async def seed_database(database, bcrypt_rounds: int = 12, rng: random.Random | None = None) -> dict[str, int]:
    """
    Replace users, tickets and audit logs with sample data.

    Returns:
        Inserted document count per collection
    """
    rng = rng or random.Random()
    now = utc_now()

    for name in (COLLECTION_USERS, COLLECTION_TICKETS, COLLECTION_AUDIT_LOGS):
        await database[name].delete_many({})

    users: list[dict[str, Any]] = []
    for sample in SAMPLE_USERS:
        document = {
            "name": sample["name"],
            "email": sample["email"],
            "password": hash_password(sample["password"], bcrypt_rounds),
            "role": sample["role"].value,
            "createdAt": now,
        }
        result = await database[COLLECTION_USERS].insert_one(document)
        users.append({**document, "_id": result.inserted_id})
        logger.info("Created user", email=sample["email"], role=sample["role"].value)

    regular_users = [user for user in users if user["role"] == UserRole.USER.value]

    for title, description, status in SAMPLE_TICKETS:
        owner = rng.choice(regular_users)
        created_at = now - timedelta(days=rng.uniform(0, 30))
        await database[COLLECTION_TICKETS].insert_one(
            {
                "title": title,
                "description": description,
                "status": status.value,
                "userId": str(owner["_id"]),
                "createdAt": created_at,
                "updatedAt": created_at,
            }
        )

    for _ in range(SAMPLE_AUDIT_LOG_COUNT):
        actor = rng.choice(users)
        action = rng.choice(SAMPLE_AUDIT_ACTIONS)
        await database[COLLECTION_AUDIT_LOGS].insert_one(
            {
                "who": str(actor["_id"]),
                "what": action.value,
                "when": now - timedelta(days=rng.uniform(0, 30)),
                "details": f"Sample audit log entry for {action.value} by {actor['name']}",
                "ipAddress": f"192.168.1.{rng.randint(0, 254)}",
                "userAgent": "Mozilla/5.0 (Sample User Agent)",
            }
        )

    return {
        COLLECTION_USERS: len(users),
        COLLECTION_TICKETS: len(SAMPLE_TICKETS),
        COLLECTION_AUDIT_LOGS: SAMPLE_AUDIT_LOG_COUNT,
    }


async def run(
    command: str,
    roles: list[DatabaseRole],
    settings: Settings,
    establisher: ConnectionEstablisher | None = None,
) -> None:
    """
    Run ``command`` against each role in turn.

    Raises:
        ConfigurationError: If the database URIs are missing or malformed
        DatabaseConnectionError: If a target cannot be reached
    """
    registry = TargetRegistry(settings.database)
    targets = registry.resolve_targets()
    establisher = establisher or ConnectionEstablisher.from_settings(settings.database)

    for role in roles:
        connection = await establisher.establish(targets[role])
        try:
            if command == "seed":
                counts = await seed_database(connection.database, settings.auth.BCRYPT_ROUNDS)
                logger.info(f"Seeded {role.value} database", **counts)
            else:
                counts = await clear_database(connection.database)
                logger.info(f"Cleared {role.value} database", **counts)
        finally:
            establisher.close(connection)


# ============================================================================
# CLI Interface
# ============================================================================


def create_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog="ticketdesk-maintenance",
        description="Seed or clear the TicketDesk databases",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s seed                       # Seed primary and secondary
  %(prog)s clear --target secondary   # Clear the secondary only
        """,
    )

    parser.add_argument("command", choices=["seed", "clear"], help="Operation to perform")

    parser.add_argument(
        "--target",
        choices=["primary", "secondary", "both"],
        default="both",
        help="Database(s) to operate on (default: both)",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """
    Main execution flow.

    Returns:
        int: Exit code (0 for success, 1 for failure)
    """
    args = create_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(log_level=settings.logging.LOG_LEVEL, log_format="console")

    if args.target == "both":
        roles = [DatabaseRole.PRIMARY, DatabaseRole.SECONDARY]
    else:
        roles = [DatabaseRole(args.target)]

    try:
        asyncio.run(run(args.command, roles, settings))
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130
    except TicketDeskError as e:
        logger.error(f"{args.command.capitalize()} failed", error=e.message, details=e.details)
        return 1

    logger.info(f"{args.command.capitalize()} completed successfully", targets=[r.value for r in roles])
    return 0


if __name__ == "__main__":
    sys.exit(main())
