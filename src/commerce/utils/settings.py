"""Environment-driven application settings.

Protean's own configuration (providers, brokers, event store) stays with the
framework; these are the knobs the commerce core reads itself.
"""

import os

DEFAULT_PRIVILEGED_ROLES = ("admin", "subadmin", "operator")


def environment() -> str:
    """Deployment environment, read from ``ENV``, ``ENVIRONMENT`` or ``PROTEAN_ENV`` in that order."""
    for name in ("ENV", "ENVIRONMENT", "PROTEAN_ENV"):
        value = os.getenv(name)
        if value:
            return value.strip().lower()
    return "development"


def cart_merge_mode() -> str:
    """How a client-held cart folds into the stored one: ``replace`` or ``add``."""
    return os.getenv("COMMERCE_CART_MERGE_MODE", "replace").strip().lower()


def privileged_roles() -> frozenset[str]:
    """Roles allowed to read any order and to manage stock."""
    raw = os.getenv("COMMERCE_PRIVILEGED_ROLES")
    if not raw:
        return frozenset(DEFAULT_PRIVILEGED_ROLES)
    return frozenset(role.strip().lower() for role in raw.split(",") if role.strip())
