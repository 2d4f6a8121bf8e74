"""Provision a platform operator account directly in the database.

No HTTP endpoint can create the first operator, so deployments run this once.
"""
from __future__ import annotations

import argparse
import getpass
import sys
from typing import Optional, Sequence

from gymcore.auth import get_password_hash
from gymcore.database import Base, SessionLocal, engine
from gymcore.models import Account, RoleEnum

MIN_PASSWORD_LENGTH = 8


def create_operator(email: str, password: str, name: str) -> Account:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        if db.query(Account).filter(Account.email == email.lower()).first():
            raise ValueError(f"An account for {email} already exists")
        account = Account(
            email=email.lower(),
            hashed_password=get_password_hash(password),
            name=name,
            role=RoleEnum.PLATFORM_OPERATOR,
        )
        db.add(account)
        db.commit()
        db.refresh(account)
        return account
    finally:
        db.close()


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Create a GymHub platform operator account")
    parser.add_argument("email")
    parser.add_argument("--name", default="Platform Operator")
    parser.add_argument("--password", help="Prompted for when omitted")
    args = parser.parse_args(argv)

    password = args.password or getpass.getpass("Password: ")
    try:
        account = create_operator(args.email, password, args.name)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    print(f"Created platform operator {account.email} with id {account.id}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
