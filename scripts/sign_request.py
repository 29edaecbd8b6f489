#!/usr/bin/env python3
"""
Build a signed deletion callback for a configured app, for manual testing.

Usage:
    python scripts/sign_request.py <app_id> <user_id>
    curl -X POST -d "signed_request=$(python scripts/sign_request.py 123 u1)" http://localhost:8000/fb_deletion/
"""

import sys
import time

from app.services.app_registry import get_app_registry
from app.services.signed_request import sign_payload


def main(argv: list[str]) -> int:
    if len(argv) != 3:
        print(__doc__.strip(), file=sys.stderr)
        return 2

    app_id, user_id = argv[1], argv[2]
    app = get_app_registry().resolve(app_id)
    if app is None or not app.secret:
        print(f"App {app_id!r} is not configured with a secret", file=sys.stderr)
        return 1

    now = int(time.time())
    print(sign_payload(
        {"app_id": app_id, "user_id": user_id, "issued_at": now, "expires": now + 3600},
        app.secret,
    ))
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
