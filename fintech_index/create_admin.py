# fintech_index/create_admin.py
"""
Crea el primer administrador (no se puede registrar un admin desde la app).

    fintech-index-create-admin --email admin@example.com --name "Admin"

Si no se pasa --password se pide por consola.
"""
from __future__ import annotations

import argparse
import getpass
import logging
from typing import Optional, Sequence

from fintech_index.db import Base, SessionLocal, engine
from fintech_index.models.user import Role, User
from fintech_index.security import get_user_by_email, hash_password, normalize_email

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Create a verified admin user.")
    parser.add_argument("--email", required=True)
    parser.add_argument("--name", required=True)
    parser.add_argument("--password", help="prompted for when omitted")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    logging.basicConfig(level="INFO", format="%(asctime)s | %(levelname)s | %(name)s | %(message)s")
    args = build_parser().parse_args(argv)
    password = args.password or getpass.getpass("Password: ")
    if not password:
        log.error("Password cannot be empty")
        return 1

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        if get_user_by_email(db, args.email):
            log.error("A user with email %s already exists", args.email)
            return 1
        db.add(User(
            email=normalize_email(args.email),
            name=args.name.strip(),
            password_hash=hash_password(password),
            role=Role.ADMIN.value,
            is_verified=True,
        ))
        db.commit()
    finally:
        db.close()

    log.info("Admin %s created", args.email)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
