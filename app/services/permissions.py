"""
Permission resolver: (principal, resource, level) -> allow/deny.

Evaluation order, first match wins:

1. admin role
2. owner of the resource's collection
3. the first scope in the resource's chain (most specific first) holding
   any grant for the principal; later scopes are not consulted even if
   they would grant more
4. public read of a visible collection/category/product
5. deny

Read checks never raise: internal faults degrade to deny. Mutations go
through `authorize_write`, which also requires a writer role.
"""
import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from app.auth.decision import Decision, allow, deny
from app.auth.permissions import ACCESS_LEVELS, WRITER_ROLES, level_satisfies
from app.errors import PermissionDenied
from app.metrics import record_decision
from app.services import hierarchy
from app.services.grants import grants_for_chain
from models import db
from models.order import Order
from models.user import UserProfile

logger = logging.getLogger(__name__)


def _evaluate(principal: Optional[UserProfile], resource, required_level: str) -> Decision:
    collection_id = hierarchy.collection_id_of(resource)

    if principal is not None and principal.is_active:
        if principal.role == "admin":
            return allow("admin")

        if hierarchy.owner_of(collection_id) == principal.id:
            return allow("owner")

        chain = hierarchy.scope_chain(resource)
        found = grants_for_chain(principal.id, chain)
        for key in chain:
            record = found.get(key)
            if record is None:
                continue
            if level_satisfies(record.access_level, required_level):
                return allow(f"grant:{key[0]}")
            break

    if (
        required_level == "view"
        and not isinstance(resource, Order)
        and hierarchy.visibility_of(collection_id)
    ):
        return allow("public")

    return deny()


def check(principal: Optional[UserProfile], resource, required_level: str = "view") -> Decision:
    if required_level not in ACCESS_LEVELS:
        decision = deny("invalid_level")
    elif resource is None:
        decision = deny("no_resource")
    else:
        try:
            decision = _evaluate(principal, resource, required_level)
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("permission check failed in storage; denying")
            decision = deny("error")
        except Exception:
            logger.exception("permission check failed; denying")
            decision = deny("error")

    record_decision(decision.reason, decision.allowed)
    if not decision:
        logger.info(
            "access denied: principal=%s resource=%s level=%s reason=%s",
            getattr(principal, "id", None),
            getattr(resource, "id", None),
            required_level,
            decision.reason,
        )
    return decision


def can_write(principal: Optional[UserProfile], resource) -> bool:
    if principal is None or principal.role not in WRITER_ROLES:
        return False
    return bool(check(principal, resource, "edit"))


def authorize_write(principal: Optional[UserProfile], resource) -> None:
    """Raise PermissionDenied unless `principal` may mutate `resource`."""
    if principal is None:
        raise PermissionDenied("Authentication required")
    if principal.role not in WRITER_ROLES:
        raise PermissionDenied("Merchant role or higher required to modify catalog content")
    if not check(principal, resource, "edit"):
        raise PermissionDenied("You do not have edit access to this resource")


__all__ = ["check", "can_write", "authorize_write"]
