"""
keystash CLI — manage stored credentials.

Usage:
    keystash set TYPE KEY VALUE     # Store a credential (--meta k=v, --expires-in 1h)
    keystash get KEY                # Show a credential (--show to print the value)
    keystash update KEY VALUE       # Replace a value, merging --meta
    keystash delete KEY             # Remove a credential
    keystash list                   # List stored keys (file backend only)
    keystash clear --yes            # Remove every credential (file backend only)
    keystash refresh KEY DURATION   # Push expiry to now + DURATION
    keystash status                 # Counts by type and expiry
    keystash validate               # Fail if any credential has expired
    keystash cleanup                # Delete expired credentials
    keystash init-key               # Generate a master key file
    keystash version                # Show version
"""

from __future__ import annotations

import argparse
import logging
import sys

from keystash.vault.durations import parse_duration
from keystash.vault.errors import CredentialError
from keystash.vault.models import CredentialType


def _parse_meta(pairs: list[str] | None) -> dict[str, str]:
    meta: dict[str, str] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"metadata must look like key=value, got {pair!r}")
        meta[key] = value
    return meta


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="keystash",
        description="keystash — secure credential storage for CLI tools.",
    )
    parser.add_argument("--version", action="store_true", help="Show version and exit")

    subparsers = parser.add_subparsers(dest="command")

    # set
    set_parser = subparsers.add_parser("set", help="Store a credential")
    set_parser.add_argument("type", choices=[t.value for t in CredentialType], help="Credential type")
    set_parser.add_argument("key", help="Credential key, e.g. github.api_key")
    set_parser.add_argument("value", help="Secret value")
    set_parser.add_argument("--meta", action="append", metavar="K=V", help="Metadata tag (repeatable)")
    set_parser.add_argument("--expires-in", help="Expire after a duration, e.g. 1h, 30m, 7d")

    # get
    get_parser = subparsers.add_parser("get", help="Show a credential")
    get_parser.add_argument("key")
    get_parser.add_argument("--show", action="store_true", help="Print the secret value unmasked")

    # update
    update_parser = subparsers.add_parser("update", help="Replace a credential's value")
    update_parser.add_argument("key")
    update_parser.add_argument("value")
    update_parser.add_argument("--meta", action="append", metavar="K=V", help="Metadata tag to merge")

    # delete
    delete_parser = subparsers.add_parser("delete", help="Remove a credential")
    delete_parser.add_argument("key")

    # list / clear
    subparsers.add_parser("list", help="List stored credential keys")
    clear_parser = subparsers.add_parser("clear", help="Remove every stored credential")
    clear_parser.add_argument("--yes", "-y", action="store_true", help="Confirm removal")

    # refresh
    refresh_parser = subparsers.add_parser("refresh", help="Extend a credential's expiry")
    refresh_parser.add_argument("key")
    refresh_parser.add_argument("duration", help="New lifetime from now, e.g. 1h")

    # maintenance
    subparsers.add_parser("status", help="Show credential counts")
    subparsers.add_parser("validate", help="Fail if any credential has expired")
    subparsers.add_parser("cleanup", help="Delete expired credentials")

    # init-key
    key_parser = subparsers.add_parser("init-key", help="Generate a master key file")
    key_parser.add_argument("--path", type=str, help="Key path (default: $KEYSTASH_MASTER_KEY)")

    # version
    subparsers.add_parser("version", help="Show version")

    args = parser.parse_args(argv)

    if args.version or args.command == "version":
        from keystash import __version__

        print(f"keystash {__version__}")
        return 0

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "init-key":
        return _cmd_init_key(args)

    from keystash.config import get_config
    from keystash.vault.manager import create_manager

    try:
        cfg = get_config()
        logging.basicConfig(
            level=getattr(logging, cfg.log_level, logging.WARNING),
            format="%(levelname)s %(name)s: %(message)s",
        )
        manager = create_manager(cfg)
    except (ValueError, FileNotFoundError) as e:
        print(f"Error: {e}")
        return 1

    handler = _COMMANDS[args.command]
    try:
        return handler(manager, args)
    except (CredentialError, ValueError) as e:
        print(f"Error: {e}")
        return 1


def _cmd_set(manager, args: argparse.Namespace) -> int:
    meta = _parse_meta(args.meta)
    if args.expires_in:
        parse_duration(args.expires_in)
        meta["expires_in"] = args.expires_in
    cred = manager.store(args.type, args.key, args.value, meta)
    expiry = f", expires {cred.expires_at.isoformat()}" if cred.expires_at else ""
    print(f"Stored {cred.description}{expiry}")
    return 0


def _cmd_get(manager, args: argparse.Namespace) -> int:
    cred = manager.retrieve(args.key)
    print(f"  Key:         {args.key}")
    print(f"  Type:        {cred.type.value}")
    print(f"  Value:       {cred.value if args.show else cred.masked_value()}")
    print(f"  Encrypted:   {'yes' if cred.encrypted else 'no'}")
    print(f"  Created:     {cred.created_at.isoformat()}")
    print(f"  Updated:     {cred.updated_at.isoformat()}")
    print(f"  Expires:     {cred.expires_at.isoformat() if cred.expires_at else 'never'}")
    for k, v in sorted(cred.metadata.items()):
        print(f"  meta.{k}: {v}")
    return 0


def _cmd_update(manager, args: argparse.Namespace) -> int:
    manager.update(args.key, args.value, _parse_meta(args.meta))
    print(f"Updated {args.key}")
    return 0


def _cmd_delete(manager, args: argparse.Namespace) -> int:
    manager.delete(args.key)
    print(f"Deleted {args.key}")
    return 0


def _cmd_list(manager, args: argparse.Namespace) -> int:
    keys = manager.list()
    if not keys:
        print("No credentials stored.")
        return 0
    for key in keys:
        print(f"  {key}")
    return 0


def _cmd_clear(manager, args: argparse.Namespace) -> int:
    if not args.yes:
        print("Refusing to clear credentials without --yes.")
        return 1
    manager.clear()
    print("All credentials removed.")
    return 0


def _cmd_refresh(manager, args: argparse.Namespace) -> int:
    cred = manager.refresh(args.key, args.duration)
    print(f"Refreshed {args.key}, expires {cred.expires_at.isoformat()}")
    return 0


def _cmd_status(manager, args: argparse.Namespace) -> int:
    status = manager.get_credential_status()
    print(f"  Service:     {manager.service_name}")
    print(f"  Backend:     {manager.backend.name}")
    print(f"  Total:       {status.total_credentials}")
    print(f"  Valid:       {status.valid}")
    print(f"  Expired:     {status.expired}")
    for type_name, count in sorted(status.by_type.items()):
        print(f"    {type_name}: {count}")
    return 0


def _cmd_validate(manager, args: argparse.Namespace) -> int:
    manager.validate_credentials()
    print("All credentials valid.")
    return 0


def _cmd_cleanup(manager, args: argparse.Namespace) -> int:
    cleaned = manager.cleanup_expired_credentials()
    print(f"Cleaned up {cleaned} expired credentials")
    return 0


def _cmd_init_key(args: argparse.Namespace) -> int:
    from keystash.config import get_config
    from keystash.vault.crypto import init_master_key

    try:
        path = args.path or get_config().master_key_path
    except ValueError as e:
        print(f"Error: {e}")
        return 1
    if not path:
        print("Error: no key path. Pass --path or set KEYSTASH_MASTER_KEY.")
        return 1
    key_path = init_master_key(path)
    print(f"Master key at {key_path}")
    return 0


_COMMANDS = {
    "set": _cmd_set,
    "get": _cmd_get,
    "update": _cmd_update,
    "delete": _cmd_delete,
    "list": _cmd_list,
    "clear": _cmd_clear,
    "refresh": _cmd_refresh,
    "status": _cmd_status,
    "validate": _cmd_validate,
    "cleanup": _cmd_cleanup,
}


if __name__ == "__main__":
    sys.exit(main())
