import sys
import os
import argparse
from datetime import timedelta

# Ensure we can import app modules
sys.path.append(os.getcwd())

from app.core.config import settings
from app.schemas.auth import Role
from app.services.auth import create_access_token


def issue_token():
    """Mint a bearer token locally, standing in for the identity provider."""
    if settings.environment not in ("development", "testing"):
        sys.exit("Refusing to mint tokens outside development")

    parser = argparse.ArgumentParser()
    parser.add_argument("employee_id")
    parser.add_argument("--name")
    parser.add_argument("--email")
    parser.add_argument("--team")
    parser.add_argument("--role", action="append", choices=[r.value for r in Role], default=None)
    parser.add_argument("--hours", type=int, default=8)
    args = parser.parse_args()

    token = create_access_token(
        {
            "sub": args.employee_id,
            "name": args.name,
            "email": args.email,
            "team_id": args.team,
            "roles": args.role or [Role.EMPLOYEE.value],
        },
        expires_delta=timedelta(hours=args.hours),
    )
    print(token)


if __name__ == "__main__":
    issue_token()
