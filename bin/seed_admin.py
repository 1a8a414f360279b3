"""
Bootstrap script: creates the first admin user.

Run once after the initial migration:
    python bin/seed_admin.py

The script reads FIRST_ADMIN_USERNAME and FIRST_ADMIN_PASSWORD from the
environment or etc/app.conf.  After the row is inserted those values are no
longer used by the application.  Registration through the API always
creates ``user`` accounts, so this is the only way to get the first admin.
"""

import sys
import os

# ---------------------------------------------------------------------------
# Path setup so backend modules are importable from a plain checkout
# ---------------------------------------------------------------------------
# bin/seed_admin.py  →  ../  →  project root
_PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
_BACKEND_DIR = os.path.join(_PROJECT_ROOT, "backend")
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)

from core.config import settings          # noqa: E402
from core.logger import logger            # noqa: E402
from core.security import hash_password   # noqa: E402
from database import SessionLocal         # noqa: E402
from models.user import User              # noqa: E402


def seed() -> bool:
    """Insert the admin row.  Returns True if a row was created."""
    if not settings.first_admin_username or not settings.first_admin_password:
        logger.warning("FIRST_ADMIN_USERNAME or FIRST_ADMIN_PASSWORD not set: nothing to do")
        return False

    db = SessionLocal()
    try:
        existing = db.query(User).filter(User.username == settings.first_admin_username).first()
        if existing:
            logger.info("Admin '%s' already exists: skipping", settings.first_admin_username)
            return False

        admin = User(
            username=settings.first_admin_username,
            password_hash=hash_password(settings.first_admin_password),
            role="admin",
        )
        db.add(admin)
        db.commit()
        logger.info("Admin '%s' created", settings.first_admin_username)
        return True
    finally:
        db.close()


if __name__ == "__main__":
    seed()
