#!/usr/bin/env python3
"""Simple management CLI for administrative tasks.

Usage:
  python manage.py create_admin --email admin@example.com --password secret
  python manage.py create_admin --email admin@example.com    (will prompt for password)
  python manage.py list_admins
  python manage.py rotate_admin_password --email admin@example.com --generate-password
  python manage.py deliver_pending
"""
import argparse
import getpass
import os
import re
import secrets
import sys
import traceback

from utils import store
from utils.auth import hash_password


def create_parser():
    parser = argparse.ArgumentParser(prog="manage.py", description="Management CLI for the job application tracker")
    subparsers = parser.add_subparsers(dest="command")

    create_admin = subparsers.add_parser("create_admin", help="Create or update an administrator account")
    create_admin.add_argument("--email", required=True, help="Email address for the admin account")
    create_admin.add_argument("--name", default="Administrator", help="Display name for the admin account")
    create_admin.add_argument(
        "--password",
        required=False,
        help="Password for the admin account. If omitted, you will be prompted unless --generate-password is used",
    )
    create_admin.add_argument(
        "--generate-password",
        action="store_true",
        help="Generate a secure one-time password instead of prompting or using --password",
    )
    create_admin.add_argument(
        "--otp-file",
        required=False,
        help="If provided with --generate-password, write the generated password to this file (securely)",
    )
    create_admin.add_argument("--force", action="store_true", help="Update the password if the account already exists")

    subparsers.add_parser("list_admins", help="List admin accounts")

    rotate = subparsers.add_parser("rotate_admin_password", help="Rotate/update an admin password")
    rotate.add_argument("--email", required=True, help="Email address for the admin account")
    rotate.add_argument(
        "--password", required=False, help="Password to set (if omitted, prompt or use --generate-password)"
    )
    rotate.add_argument("--generate-password", action="store_true", help="Generate a secure one-time password")
    rotate.add_argument(
        "--otp-file",
        required=False,
        help="If provided with --generate-password, write the generated password to this file (securely)",
    )

    subparsers.add_parser(
        "deliver_pending",
        help="Run one notification delivery pass now (no live sessions are connected to this process)",
    )

    return parser


def is_valid_email(value):
    # Simple validation
    return bool(re.match(r"[^@\s]+@[^@\s]+\.[^@\s]+", value or ""))


def prompt_password():
    pw = getpass.getpass("Enter password: ")
    pw2 = getpass.getpass("Confirm password: ")
    if pw != pw2:
        print("Passwords do not match. Aborting.")
        return None
    if not pw:
        print("Empty password not allowed. Aborting.")
        return None
    return pw


def generate_password(length=24):
    # Use URL-safe token and trim to desired length
    return secrets.token_urlsafe(32)[:length]


def write_otp_to_file(path, password):
    try:
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        # Owner read/write only where the platform supports it
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w") as f:
            f.write(password + "\n")
        print(f"✅ Generated password written to {path}")
        return True
    except OSError as e:
        print(f"❌ Failed to write OTP to file {path}: {e}")
        return False


def resolve_password(args):
    """Pick the password from --password, --generate-password or an interactive prompt."""
    if args.generate_password:
        pw = generate_password()
        if args.otp_file:
            if not write_otp_to_file(args.otp_file, pw):
                return None
        else:
            print("✅ Generated one-time password (keep it safe):")
            print(pw)
        return pw
    if args.password:
        return args.password
    return prompt_password()


def create_admin_account(email, password, name="Administrator", force=False):
    email = (email or "").strip().lower()
    if not is_valid_email(email):
        print("Invalid email address")
        return False

    try:
        password_hash = hash_password(password)
    except ValueError as e:
        print(f"❌ Failed to hash password: {e}")
        return False

    try:
        existing = store.find_admin_by_email(email)
        if existing:
            if not force:
                print("Admin already exists. Use --force to update the password.")
                return False
            store.set_admin_password(existing["adminID"], password_hash)
            print(f"✅ Updated existing admin {email}")
            return True

        store.create_admin(name, email, password_hash)
        print(f"✅ Created admin account: {email}")
        return True
    except Exception as exc:
        print("❌ Failed to create/update admin:", exc)
        print(traceback.format_exc())
        return False


def rotate_admin_password(email, password):
    email = (email or "").strip().lower()
    try:
        admin = store.find_admin_by_email(email)
        if not admin:
            print("Admin not found.")
            return False
        store.set_admin_password(admin["adminID"], hash_password(password))
        print("✅ Password rotated successfully.")
        return True
    except Exception as exc:
        print("❌ Failed to rotate password:", exc)
        return False


def list_admin_accounts():
    admins = store.list_admins()
    if not admins:
        print("No admin accounts found.")
        return
    for row in admins:
        print(f"- {row.get('email')} (adminID={row.get('adminID')}, name={row.get('name')})")


def deliver_pending():
    from app import poller

    delivered = poller.tick()
    print(f"✅ Marked {delivered} notification(s) delivered")
    return delivered


def _app_context():
    from app import app

    return app.app_context()


def main(argv=None):
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    if args.command == "deliver_pending":
        # The poller opens its own application context per tick
        deliver_pending()
        return 0

    with _app_context():
        if args.command == "create_admin":
            pw = resolve_password(args)
            if not pw:
                return 1
            return 0 if create_admin_account(args.email, pw, name=args.name, force=args.force) else 2

        if args.command == "list_admins":
            try:
                list_admin_accounts()
            except Exception as exc:
                print("❌ Failed to list admins:", exc)
                return 2
            return 0

        if args.command == "rotate_admin_password":
            pw = resolve_password(args)
            if not pw:
                return 1
            return 0 if rotate_admin_password(args.email, pw) else 2

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
