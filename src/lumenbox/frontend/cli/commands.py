"""Command line entry point for LumenBox.

    lumenbox encrypt NAME [--stdin]    encrypt a secret into NAME.enc
    lumenbox decrypt NAME [--copy]     print (or copy) the secret stored in NAME.enc
    lumenbox list                      list stored containers
    lumenbox info NAME                 show the header of NAME.enc (format, salt, KDF)
    lumenbox delete NAME               remove NAME.enc
    lumenbox migrate NAME              rewrite a legacy container in the sealed format
    lumenbox new-wallet NAME           create a wallet, store NAME-mnemonic and NAME-secret
    lumenbox tui                       start the Textual interface

Passwords are always read interactively with getpass.
"""

from __future__ import annotations

import argparse
import getpass
import logging
import sys
from typing import Optional, Sequence

import pyperclip

from lumenbox.core.exceptions import InvalidInputError, LumenBoxError
from lumenbox.frontend.cli.clipboard import copy_to_clipboard
from lumenbox.frontend.cli.context import (
    AppContext,
    build_context,
    create_wallet,
    migrate_secret,
    open_secret,
)
from lumenbox.frontend.cli.logging_config import configure_logging

logger = logging.getLogger(__name__)


def _read_password(confirm: bool = False) -> str:
    password = getpass.getpass("Password: ")
    if confirm and not password:
        raise InvalidInputError("Password must not be empty")
    if confirm and password != getpass.getpass("Confirm password: "):
        raise InvalidInputError("Passwords do not match")
    return password


def _read_secret(from_stdin: bool) -> str:
    if from_stdin:
        secret = sys.stdin.read().rstrip("\r\n")
    else:
        secret = getpass.getpass("Secret (input hidden): ")
    if not secret:
        raise InvalidInputError("Secret must not be empty")
    return secret


def cmd_encrypt(ctx: AppContext, args: argparse.Namespace) -> int:
    secret = _read_secret(args.stdin)
    password = _read_password(confirm=True)
    path = ctx.vault.encrypt_and_save(password, secret, args.name)
    print(f"Saved {path}")
    return 0


def cmd_decrypt(ctx: AppContext, args: argparse.Namespace) -> int:
    password = _read_password()
    secret = open_secret(ctx, password, args.name)
    if args.copy:
        copy_to_clipboard(secret)
        print(f"Copied {args.name} to clipboard")
    else:
        print(secret)
    return 0


def cmd_list(ctx: AppContext, args: argparse.Namespace) -> int:
    for name in ctx.vault.list_secrets():
        print(name)
    return 0


def cmd_info(ctx: AppContext, args: argparse.Namespace) -> int:
    info = ctx.vault.describe(args.name)
    print(f"name:       {info['name']}")
    print(f"format:     {info['format']}")
    print(f"size:       {info['size']} bytes ({info['ciphertext_bytes']} ciphertext)")
    for key, value in info["kdf"].items():
        print(f"kdf.{key}: {value}")
    return 0


def cmd_delete(ctx: AppContext, args: argparse.Namespace) -> int:
    ctx.vault.delete_secret(args.name)
    print(f"Deleted {args.name}")
    return 0


def cmd_migrate(ctx: AppContext, args: argparse.Namespace) -> int:
    password = _read_password()
    if migrate_secret(ctx, password, args.name):
        print(f"Migrated {args.name} to the sealed format")
    else:
        print(f"{args.name} is already sealed")
    return 0


def cmd_new_wallet(ctx: AppContext, args: argparse.Namespace) -> int:
    password = _read_password(confirm=True)
    public_key = create_wallet(ctx, password, args.name)
    print(f"Public key: {public_key}")
    return 0


def cmd_tui(ctx: AppContext, args: argparse.Namespace) -> int:  # pragma: no cover - UI only
    from lumenbox.frontend.cli.app import LumenBoxApp

    LumenBoxApp(ctx=ctx).run()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lumenbox", description="Password-protected local secret store")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("encrypt", help="encrypt a secret and save it")
    p.add_argument("name")
    p.add_argument("--stdin", action="store_true", help="read the secret from standard input")
    p.set_defaults(func=cmd_encrypt)

    p = sub.add_parser("decrypt", help="decrypt a stored secret")
    p.add_argument("name")
    p.add_argument("--copy", action="store_true", help="copy to the clipboard instead of printing")
    p.set_defaults(func=cmd_decrypt)

    p = sub.add_parser("list", help="list stored secrets")
    p.set_defaults(func=cmd_list)

    p = sub.add_parser("info", help="show container header details")
    p.add_argument("name")
    p.set_defaults(func=cmd_info)

    p = sub.add_parser("delete", help="delete a stored secret")
    p.add_argument("name")
    p.set_defaults(func=cmd_delete)

    p = sub.add_parser("migrate", help="rewrite a legacy container in the sealed format")
    p.add_argument("name")
    p.set_defaults(func=cmd_migrate)

    p = sub.add_parser("new-wallet", help="generate a wallet and store its mnemonic and secret")
    p.add_argument("name")
    p.set_defaults(func=cmd_new_wallet)

    p = sub.add_parser("tui", help="start the terminal interface")
    p.set_defaults(func=cmd_tui)

    return parser


def main(argv: Optional[Sequence[str]] = None, ctx: Optional[AppContext] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        ctx = ctx or build_context()
        configure_logging(ctx.settings.log_level)
        return args.func(ctx, args)
    except (LumenBoxError, OSError, pyperclip.PyperclipException) as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
