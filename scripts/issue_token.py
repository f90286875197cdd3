#!/usr/bin/env python3
"""Issue a bearer token for a user id, for local development and scripting."""
import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from lacrosselens.api.dependencies import create_access_token


def main():
    parser = argparse.ArgumentParser(description="Print a signed API token")
    parser.add_argument("user_id", help="User id to put in the token subject")
    parser.add_argument(
        "--hours",
        type=int,
        default=None,
        help="Token lifetime in hours (defaults to ACCESS_TOKEN_EXPIRE_HOURS)",
    )
    args = parser.parse_args()

    print(create_access_token(args.user_id, expires_hours=args.hours))


if __name__ == "__main__":
    main()
