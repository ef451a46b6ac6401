"""StyleHub storefront management CLI.

Schema management for SQL-backed deployments and a hook for the periodic
cart expiry sweep, for schedulers that prefer a command over the HTTP
maintenance endpoint.

Usage:
    python src/manage.py setup-db       # Create all tables
    python src/manage.py drop-db        # Drop all tables
    python src/manage.py expire-carts   # Release stock held by idle carts
"""

import argparse
import sys
from datetime import datetime


def _domain():
    from storefront.domain import storefront

    print("Initializing storefront domain...")
    storefront.init()
    return storefront


def setup_database():
    from storefront.utils.db import setup_db

    domain = _domain()
    print("Creating storefront database schema...")
    providers = setup_db(domain)
    if providers:
        print(f"  schema ready on: {', '.join(providers)}")
    else:
        print("  no SQL providers configured, nothing to create.")
    print("Done.")


def drop_database():
    from storefront.utils.db import drop_db

    domain = _domain()
    print("Dropping storefront database schema...")
    providers = drop_db(domain)
    print(f"  dropped: {', '.join(providers) or 'nothing'}")
    print("Done.")


def expire_idle_carts(as_of=None):
    from storefront.cart.management import expire_carts
    from storefront.utils.logging import configure_logging

    configure_logging()
    domain = _domain()
    with domain.domain_context():
        expired = expire_carts(as_of)
    print(f"Expired {expired} cart(s).")


def main():
    parser = argparse.ArgumentParser(description="StyleHub storefront management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    expire_parser = subparsers.add_parser("expire-carts", help="Sweep carts past their expiry date")
    expire_parser.add_argument(
        "--as-of",
        type=datetime.fromisoformat,
        help="ISO timestamp to sweep against (default: now)",
    )

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "expire-carts":
        expire_idle_carts(args.as_of)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
