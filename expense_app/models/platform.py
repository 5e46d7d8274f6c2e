from enum import Enum
from typing import Dict


class Platform(str, Enum):
    """Stripe platform account a connected account lives on"""
    US = "US"
    UK = "UK"
    EU = "EU"


# Countries offered at registration, in display order
COUNTRIES = {
    "US": "United States",
    "AT": "Austria",
    "BE": "Belgium",
    "HR": "Croatia",
    "CY": "Cyprus",
    "EE": "Estonia",
    "FI": "Finland",
    "FR": "France",
    "DE": "Germany",
    "GR": "Greece",
    "IE": "Ireland",
    "IT": "Italy",
    "LV": "Latvia",
    "LT": "Lithuania",
    "LU": "Luxembourg",
    "MT": "Malta",
    "NL": "Netherlands",
    "PT": "Portugal",
    "SK": "Slovakia",
    "SI": "Slovenia",
    "ES": "Spain",
    "GB": "United Kingdom",
}


def platform_for_country(country: str) -> Platform:
    """Maps an ISO country code to the platform that serves it"""
    country = country.upper()
    if country not in COUNTRIES:
        raise ValueError(f"Unsupported country: {country}")
    if country == "US":
        return Platform.US
    if country == "GB":
        return Platform.UK
    return Platform.EU


def enabled_platforms() -> Dict[Platform, bool]:
    """A platform is enabled when its secret key is configured"""
    from expense_app.utils.stripe_authentication import get_stripe_secret_key

    return {platform: bool(get_stripe_secret_key(platform)) for platform in Platform}
