#!/usr/bin/env python3
"""Delete expired ad tokens and admin credentials.

Intended to be run from a scheduler (e.g., Render Cron) every hour.
Unconsumed tokens past their TTL can never be settled, so they are dead rows.
"""

import economy
from ads import purge_expired_tokens
from app import app
from extensions import db


def main():
    with app.app_context():
        tokens = purge_expired_tokens(db.session, economy.now_ms())
        admin_tokens = app.extensions["admin_auth"].purge_expired(db.session)

    print({
        "ok": True,
        "ad_tokens": tokens,
        "admin_tokens": admin_tokens,
    })


if __name__ == "__main__":
    main()
