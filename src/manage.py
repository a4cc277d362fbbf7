"""Furnishop management CLI.

Schema management plus the maintenance jobs the scheduler also runs, so an
operator can trigger them by hand.

Usage:
    python src/manage.py setup-db                 # Create all tables
    python src/manage.py drop-db                  # Drop all tables
    python src/manage.py sweep-reservations       # Cancel expired reservations now
    python src/manage.py sync-sold [--dry-run]    # Rebuild product sold counters
    python src/manage.py clean-chat-rooms         # Merge duplicate + close idle rooms
    python src/manage.py translate-catalog        # Fill missing Chinese texts
    python src/manage.py create-admin --email a@b.vn --name Admin --password secret
"""

import argparse
import sys

from rich.console import Console
from rich.markup import escape
from rich.table import Table

console = Console()

DOMAIN_NAMES = ["storefront", "support", "identity"]


def _domains():
    from identity.domain import identity
    from storefront.domain import storefront
    from support.domain import support

    return {"storefront": storefront, "support": support, "identity": identity}


def _initialized(name):
    domain = _domains()[name]
    domain.init()
    return domain


def setup_databases(domains=None):
    """Create database schemas for the specified (or all) domains."""
    from shared.db import setup_db

    for name in domains or DOMAIN_NAMES:
        console.print(f"Initializing [bold]{name}[/bold] domain...")
        domain = _initialized(name)
        console.print(f"Creating {name} database schema...")
        setup_db(domain)
        console.print(f"  [green]{name} schema ready.[/green]")

    console.print("[bold green]Done.[/bold green]")


def drop_databases(domains=None):
    """Drop database schemas for the specified (or all) domains."""
    from shared.db import drop_db

    for name in domains or DOMAIN_NAMES:
        console.print(f"Initializing [bold]{name}[/bold] domain...")
        domain = _initialized(name)
        console.print(f"Dropping {name} database schema...")
        drop_db(domain)
        console.print(f"  [yellow]{name} schema dropped.[/yellow]")

    console.print("[bold green]Done.[/bold green]")


def sweep_reservations():
    _initialized("storefront")
    from scheduler import sweep_reservations as run_sweep

    console.print(f"Cancelled [bold]{run_sweep()}[/bold] expired order(s).")


def sync_sold(dry_run=False):
    domain = _initialized("storefront")
    from storefront.product.sold_sync import SyncSoldCounters

    with domain.domain_context():
        updated = domain.process(SyncSoldCounters(dry_run=dry_run), asynchronous=False)
    suffix = " (dry run, nothing saved)" if dry_run else ""
    console.print(f"[bold]{updated}[/bold] product(s) had a stale sold counter{suffix}.")


def clean_chat_rooms():
    _initialized("support")
    from scheduler import clean_chat_rooms as run_cleanup

    result = run_cleanup()
    console.print(
        f"Removed [bold]{result['merged']}[/bold] duplicate room(s), "
        f"closed [bold]{result['closed']}[/bold] inactive room(s)."
    )


def _error_table(kind, errors) -> Table:
    table = Table(title=f"Untranslated {kind}", title_style="bold red")
    table.add_column("ID", style="dim")
    table.add_column("Error")
    for error in errors:
        table.add_row(error["id"], escape(error["error"]))
    return table


def translate_catalog(target="zh", force=False, only=None, delay=None):
    domain = _initialized("storefront")
    from storefront.translation.pipeline import TranslateCategories, TranslateProducts

    commands = {"categories": TranslateCategories, "products": TranslateProducts}
    kinds = [only] if only else ["categories", "products"]

    with domain.domain_context():
        for kind in kinds:
            console.print(f"Translating {kind} to {target}...")
            report = domain.process(
                commands[kind](target=target, force=force, delay_seconds=delay),
                asynchronous=False,
            )
            console.print(f"  {report['translated']}/{report['total']} translated, {report['failed']} failed.")
            if report["errors"]:
                console.print(_error_table(kind, report["errors"]))


def create_admin(email, name, password, phone=None):
    domain = _initialized("identity")
    from identity.user.registration import RegisterUser
    from identity.user.user import Role

    with domain.domain_context():
        user_id = domain.process(
            RegisterUser(email=email, name=name, password=password, phone=phone, role=Role.ADMIN.value),
            asynchronous=False,
        )
    console.print(f"[green]Admin account {email} created[/green] ({user_id}).")


def main():
    parser = argparse.ArgumentParser(description="Furnishop management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    setup_parser = subparsers.add_parser("setup-db", help="Create all database tables")
    setup_parser.add_argument(
        "--domain",
        choices=DOMAIN_NAMES,
        nargs="*",
        help="Specific domain(s) to set up (default: all)",
    )

    drop_parser = subparsers.add_parser("drop-db", help="Drop all database tables")
    drop_parser.add_argument(
        "--domain",
        choices=DOMAIN_NAMES,
        nargs="*",
        help="Specific domain(s) to drop (default: all)",
    )

    subparsers.add_parser("sweep-reservations", help="Cancel Pending orders whose reservation expired")

    sold_parser = subparsers.add_parser("sync-sold", help="Recompute product sold counters from orders")
    sold_parser.add_argument("--dry-run", action="store_true", help="Report without saving")

    subparsers.add_parser("clean-chat-rooms", help="Merge duplicate rooms and close inactive ones")

    translate_parser = subparsers.add_parser("translate-catalog", help="Machine-translate catalog texts")
    translate_parser.add_argument("--target", default="zh", help="Target language (default: zh)")
    translate_parser.add_argument("--force", action="store_true", help="Re-translate existing texts")
    translate_parser.add_argument("--only", choices=["products", "categories"])
    translate_parser.add_argument("--delay", type=float, help="Seconds to wait between records")

    admin_parser = subparsers.add_parser("create-admin", help="Create an administrator account")
    admin_parser.add_argument("--email", required=True)
    admin_parser.add_argument("--name", required=True)
    admin_parser.add_argument("--password", required=True)
    admin_parser.add_argument("--phone")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_databases(args.domain)
    elif args.command == "drop-db":
        drop_databases(args.domain)
    elif args.command == "sweep-reservations":
        sweep_reservations()
    elif args.command == "sync-sold":
        sync_sold(args.dry_run)
    elif args.command == "clean-chat-rooms":
        clean_chat_rooms()
    elif args.command == "translate-catalog":
        translate_catalog(args.target, args.force, args.only, args.delay)
    elif args.command == "create-admin":
        create_admin(args.email, args.name, args.password, args.phone)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
