"""
Central registry of roles, access levels and merchant tiers.
"""
ROLES = ("user", "intern", "merchant", "admin")

ROLE_RANK = {
    "user": 0,
    "intern": 0,
    "merchant": 2,
    "admin": 3,
}

# roles allowed to mutate catalog resources or own collections
WRITER_ROLES = {"merchant", "admin"}

ACCESS_LEVELS = ("view", "edit")

LEVEL_RANK = {"view": 1, "edit": 2}

GRANT_SCOPES = ("collection", "category", "product")

MERCHANT_TIERS = (
    "starter_merchant",
    "verified_merchant",
    "trusted_merchant",
    "elite_merchant",
)


def role_at_least(role: str, minimum: str) -> bool:
    return ROLE_RANK.get(role, -1) >= ROLE_RANK[minimum]


def level_satisfies(granted: str, required: str) -> bool:
    """`edit` satisfies a `view` requirement; `view` never satisfies `edit`."""
    return LEVEL_RANK.get(granted, 0) >= LEVEL_RANK.get(required, 99)


def is_admin(principal) -> bool:
    """Active principals holding the admin role; a deactivated admin is nobody."""
    return principal is not None and principal.is_active and principal.role == "admin"
