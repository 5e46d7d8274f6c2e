"""Key selection for the three Stripe platform accounts"""
from typing import Optional

from expense_app.config import settings
from expense_app.models.platform import Platform


def get_stripe_secret_key(platform: Platform) -> Optional[str]:
    """Secret key of the platform, or None when it is not configured"""
    if platform == Platform.UK:
        key = settings.STRIPE_SECRET_KEY_UK
    elif platform == Platform.EU:
        key = settings.STRIPE_SECRET_KEY_EU
    elif platform == Platform.US:
        key = settings.STRIPE_SECRET_KEY_US
    else:
        raise ValueError(f"Unsupported platform: {platform}")

    return key or None


def get_stripe_publishable_key(platform: Platform) -> Optional[str]:
    """Publishable key of the platform, or None when it is not configured"""
    if platform == Platform.UK:
        key = settings.STRIPE_PUBLISHABLE_KEY_UK
    elif platform == Platform.EU:
        key = settings.STRIPE_PUBLISHABLE_KEY_EU
    elif platform == Platform.US:
        key = settings.STRIPE_PUBLISHABLE_KEY_US
    else:
        raise ValueError(f"Unsupported platform: {platform}")

    return key or None
