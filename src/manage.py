"""Storefront management CLI.

Usage:
    python src/manage.py setup-db                      # Create all tables
    python src/manage.py drop-db                       # Drop all tables
    python src/manage.py sync-catalogue                # Pull the fulfillment catalogue
    python src/manage.py create-profile USER_ID EMAIL [--name NAME] [--admin]
"""

import argparse
import json
import sys


def _domain():
    from storefront.domain import storefront

    print("Initializing storefront domain...")
    storefront.init()
    return storefront


def setup_database():
    """Create the storefront database schema."""
    from storefront.utils.db import setup_db

    domain = _domain()
    print("Creating storefront database schema...")
    setup_db(domain)
    print("Done.")


def drop_database():
    """Drop the storefront database schema."""
    from storefront.utils.db import drop_db

    domain = _domain()
    print("Dropping storefront database schema...")
    drop_db(domain)
    print("Done.")


def sync_catalogue():
    """Run a full catalogue sync and print its summary."""
    from storefront.catalogue.sync import SyncCatalogue

    domain = _domain()
    with domain.domain_context():
        summary = domain.process(SyncCatalogue(), asynchronous=False)
    print(json.dumps(summary, indent=2))
    return summary


def create_profile(user_id, email, full_name=None, admin=False):
    """Register a profile, optionally with the admin role."""
    from storefront.membership.profile import Role
    from storefront.membership.registration import RegisterProfile

    domain = _domain()
    with domain.domain_context():
        profile_id = domain.process(
            RegisterProfile(
                user_id=user_id,
                email=email,
                full_name=full_name,
                role=Role.ADMIN.value if admin else Role.USER.value,
            ),
            asynchronous=False,
        )
    print(f"Profile {profile_id} created{' (admin)' if admin else ''}.")
    return profile_id


def main():
    parser = argparse.ArgumentParser(description="Storefront management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    subparsers.add_parser("sync-catalogue", help="Refresh products from the fulfillment provider")

    profile_parser = subparsers.add_parser("create-profile", help="Register a member profile")
    profile_parser.add_argument("user_id", help="Identity id issued by the auth provider")
    profile_parser.add_argument("email")
    profile_parser.add_argument("--name", dest="full_name")
    profile_parser.add_argument("--admin", action="store_true", help="Grant the admin role")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "sync-catalogue":
        sync_catalogue()
    elif args.command == "create-profile":
        create_profile(args.user_id, args.email, full_name=args.full_name, admin=args.admin)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
