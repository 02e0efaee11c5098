"""CLI entry point: directory and licensing commands."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Any, Optional, Sequence

from google.auth.exceptions import GoogleAuthError
from googleapiclient.errors import HttpError

from workspace_admin.apis.directory import DirectoryAPI
from workspace_admin.apis.licensing import LicensingAPI
from workspace_admin.batch import BatchResult
from workspace_admin.config import load_config
from workspace_admin.errors import WorkspaceAdminError
from workspace_admin.logging_config import configure_logging
from workspace_admin.products import (
    ALL_PRODUCTS,
    Product,
    get_product_by_name,
    get_product_by_sku_id,
)

logger = logging.getLogger("workspace_admin.cli")


def _emit(payload: Any) -> None:
    json.dump(payload, sys.stdout, indent=2, default=str)
    sys.stdout.write("\n")


def _read_lines(path: str) -> list[str]:
    """Read one value per line from ``path`` ("-" for stdin), skipping blanks."""
    if path == "-":
        lines = sys.stdin.read().splitlines()
    else:
        with open(path, encoding="utf-8") as fh:
            lines = fh.read().splitlines()
    return [line.strip() for line in lines if line.strip()]


def _emails(args: argparse.Namespace) -> list[str]:
    emails = list(args.emails or [])
    if args.file:
        emails.extend(_read_lines(args.file))
    if not emails:
        raise WorkspaceAdminError("no member emails given")
    return emails


def _product(value: str) -> Product:
    product = get_product_by_sku_id(value) or get_product_by_name(value)
    if product is None:
        raise WorkspaceAdminError(f"unknown SKU {value!r}; see `products`")
    return product


def _batch_exit(result: BatchResult) -> int:
    _emit({
        **result.summary(),
        "failures": [{"item": item, "error": str(exc)} for item, exc in result.failed],
    })
    return 0 if result.ok else 1


def _directory() -> DirectoryAPI:
    return DirectoryAPI.from_config(load_config())


def _licensing(with_customer: bool = False) -> tuple[LicensingAPI, Optional[str]]:
    """Licensing client, plus the customer ID when ``with_customer`` is set.

    An unconfigured customer ID is looked up through the Directory API.
    """
    config = load_config()
    customer_id = config.customer_id
    if with_customer and not customer_id:
        customer_id = DirectoryAPI.from_config(config).customer_id
    return LicensingAPI.from_config(config), customer_id


def cmd_users(args: argparse.Namespace) -> int:
    _emit(_directory().get_users(args.query))
    return 0


def cmd_groups(args: argparse.Namespace) -> int:
    _emit(_directory().get_groups(args.query))
    return 0


def cmd_members(args: argparse.Namespace) -> int:
    _emit(_directory().get_members(args.group, args.roles))
    return 0


def cmd_user_groups(args: argparse.Namespace) -> int:
    pairs = _directory().get_groups_by_user(args.user)
    _emit([
        {"group": group["email"], "name": group.get("name"), "role": member.get("role")}
        for group, member in pairs
    ])
    return 0


def cmd_add_members(args: argparse.Namespace) -> int:
    members = [{"email": e, "role": args.role.upper()} for e in _emails(args)]
    result = _directory().insert_members(members, args.group, args.workers)
    return _batch_exit(result)


def cmd_remove_members(args: argparse.Namespace) -> int:
    result = _directory().delete_members(_emails(args), args.group, args.workers)
    return _batch_exit(result)


def cmd_products(args: argparse.Namespace) -> int:
    _emit([
        {
            "product_id": p.product_id,
            "product_name": p.product_name,
            "sku_id": p.sku_id,
            "sku_name": p.sku_name,
            "unarchival_sku_id": p.unarchival_sku_id,
        }
        for p in ALL_PRODUCTS
    ])
    return 0


def cmd_licenses(args: argparse.Namespace) -> int:
    products = [_product(s) for s in args.sku] if args.sku else ALL_PRODUCTS
    api, customer_id = _licensing(with_customer=True)
    by_product = api.get_all_domain_licenses_as_map(customer_id, products)
    if args.summary:
        _emit({p.sku_name: len(items) for p, items in by_product.items()})
    else:
        _emit([item for items in by_product.values() for item in items])
    return 0


def cmd_assign_license(args: argparse.Namespace) -> int:
    product, emails = _product(args.sku), _emails(args)
    api, _ = _licensing()
    result = api.insert_many(product, emails, args.workers)
    return _batch_exit(result)


def cmd_revoke_license(args: argparse.Namespace) -> int:
    product, emails = _product(args.sku), _emails(args)
    api, _ = _licensing()
    result = api.delete_many(product, emails, args.workers)
    return _batch_exit(result)


def _add_bulk_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("emails", nargs="*", help="User emails")
    parser.add_argument(
        "--file", "-f",
        help="Read emails from a file, one per line (- for stdin)",
    )
    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=None,
        help="Concurrent workers (default: WORKSPACE_MAX_WORKERS or 10)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="workspace-admin",
        description="Google Workspace directory and licensing helpers",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    users = subparsers.add_parser("users", help="List users")
    users.add_argument("--query", "-q", default=None, help="Directory search query")
    users.set_defaults(func=cmd_users)

    groups = subparsers.add_parser("groups", help="List groups")
    groups.add_argument("--query", "-q", default=None, help="Directory search query")
    groups.set_defaults(func=cmd_groups)

    members = subparsers.add_parser("members", help="List members of a group")
    members.add_argument("group", help="Group email")
    members.add_argument(
        "--roles", "-r",
        nargs="+",
        choices=["owner", "manager", "member", "OWNER", "MANAGER", "MEMBER"],
        help="Only these roles",
    )
    members.set_defaults(func=cmd_members)

    user_groups = subparsers.add_parser("user-groups", help="Groups a user belongs to")
    user_groups.add_argument("user", help="User email")
    user_groups.set_defaults(func=cmd_user_groups)

    add = subparsers.add_parser("add-members", help="Add members to a group")
    add.add_argument("group", help="Group email")
    add.add_argument("--role", default="MEMBER", help="Role for new members")
    _add_bulk_arguments(add)
    add.set_defaults(func=cmd_add_members)

    remove = subparsers.add_parser("remove-members", help="Remove members from a group")
    remove.add_argument("group", help="Group email")
    _add_bulk_arguments(remove)
    remove.set_defaults(func=cmd_remove_members)

    products = subparsers.add_parser("products", help="Show the licensing catalog")
    products.set_defaults(func=cmd_products)

    licenses = subparsers.add_parser("licenses", help="List license assignments")
    licenses.add_argument(
        "--sku", "-s",
        action="append",
        help="SKU ID or SKU name (repeatable; default: every catalog SKU)",
    )
    licenses.add_argument(
        "--summary",
        action="store_true",
        help="Print assignment counts per SKU instead of the assignments",
    )
    licenses.set_defaults(func=cmd_licenses)

    assign = subparsers.add_parser("assign-license", help="Assign a SKU to users")
    assign.add_argument("sku", help="SKU ID or SKU name")
    _add_bulk_arguments(assign)
    assign.set_defaults(func=cmd_assign_license)

    revoke = subparsers.add_parser("revoke-license", help="Remove a SKU from users")
    revoke.add_argument("sku", help="SKU ID or SKU name")
    _add_bulk_arguments(revoke)
    revoke.set_defaults(func=cmd_revoke_license)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI entry point."""
    configure_logging(os.environ.get("LOG_LEVEL", "INFO"))
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except WorkspaceAdminError as exc:
        logger.error("%s", exc)
        return 2
    except GoogleAuthError as exc:
        logger.error("Authentication as the admin user failed: %s", exc)
        return 2
    except HttpError as exc:
        logger.error("API call failed: %s", exc, exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
