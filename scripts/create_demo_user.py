"""
Creates the demo user together with its Stripe connected account
Usage: python scripts/create_demo_user.py [COUNTRY]
"""
import logging
import sys
from pathlib import Path

# Make the project root importable
sys.path.insert(0, str(Path(__file__).parent.parent))

from expense_app.database import SessionLocal, engine, Base
from expense_app.models.platform import platform_for_country
from expense_app.models.user import User
from expense_app.services.stripe_service import create_connected_account
from expense_app.utils.security import get_password_hash

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

DEMO_EMAIL = "demo@expenses.app"
DEMO_PASSWORD = "Demo12345"


def create_demo_user(country: str = "US"):
    """Creates the demo user unless it already exists"""
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        existing_user = db.query(User).filter(User.email == DEMO_EMAIL).first()
        if existing_user:
            logger.info("Demo user already exists: %s / %s", DEMO_EMAIL, DEMO_PASSWORD)
            return

        platform = platform_for_country(country)
        demo_user = User(
            email=DEMO_EMAIL,
            password=get_password_hash(DEMO_PASSWORD),
            country=country,
            platform=platform,
            stripe_account_id=create_connected_account(platform, country, DEMO_EMAIL)
        )
        db.add(demo_user)
        db.commit()

        logger.info("Demo user created: %s / %s", DEMO_EMAIL, DEMO_PASSWORD)
        logger.info("Connected account %s on platform %s", demo_user.stripe_account_id, platform.value)
    except Exception:
        db.rollback()
        logger.exception("Could not create the demo user")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    create_demo_user(sys.argv[1].upper() if len(sys.argv) > 1 else "US")
