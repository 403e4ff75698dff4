"""Principal directory: session identity -> role and profile attributes."""
import logging
from typing import List, Optional

from flask import current_app
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from app.auth.permissions import ROLES, MERCHANT_TIERS, is_admin, role_at_least
from app.errors import PermissionDenied, NotFound, InvalidArgument, InvalidState
from models import db
from models.access import AccessGrant
from models.catalog import Collection
from models.user import UserProfile

logger = logging.getLogger(__name__)


def _is_bootstrap(identity: str) -> bool:
    bootstrap = current_app.config.get("BOOTSTRAP_ADMIN_IDENTITY")
    return bool(bootstrap) and identity == bootstrap


def get_principal(principal_id: str) -> UserProfile:
    user = db.session.get(UserProfile, principal_id) if principal_id else None
    if not user:
        raise NotFound("Principal not found")
    return user


def resolve(session_identity: Optional[str]) -> UserProfile:
    """
    Look up the principal for a session identity, provisioning it on first sight.

    New identities become `user`, except the bootstrap identity which is
    always `admin`. Calling twice never duplicates the record and never
    downgrades an elevated role. Commits when it creates or elevates.
    """
    if not session_identity or not str(session_identity).strip():
        raise NotFound("No session identity")
    identity = str(session_identity).strip()

    user = UserProfile.query.filter_by(identity=identity).first()
    if user:
        if _is_bootstrap(identity) and user.role != "admin":
            user.role = "admin"
            db.session.commit()
            logger.warning("bootstrap identity re-elevated to admin")
        return user

    user = UserProfile(identity=identity, role="admin" if _is_bootstrap(identity) else "user")
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        # another request provisioned the same identity first
        db.session.rollback()
        user = UserProfile.query.filter_by(identity=identity).first()
        if not user:
            raise
        return user
    logger.info("provisioned principal %s with role %s", user.id, user.role)
    return user


def set_role(actor: UserProfile, target_id: str, new_role: str) -> UserProfile:
    if not is_admin(actor):
        raise PermissionDenied("Only admins can change roles")
    if new_role not in ROLES:
        raise InvalidArgument(f"Unknown role: {new_role}")
    target = get_principal(target_id)
    if _is_bootstrap(target.identity) and new_role != "admin":
        raise InvalidState("The bootstrap admin cannot be demoted")
    if not role_at_least(new_role, "merchant"):
        owned = Collection.query.filter_by(owner_id=target.id).count()
        if owned:
            raise InvalidState("Principal still owns collections; transfer them first")
    target.role = new_role
    logger.info("role of %s set to %s by %s", target.id, new_role, actor.id)
    return target


def set_merchant_tier(actor: UserProfile, target_id: str, tier: str) -> UserProfile:
    if not is_admin(actor):
        raise PermissionDenied("Only admins can change merchant tiers")
    if tier not in MERCHANT_TIERS:
        raise InvalidArgument(f"Unknown merchant tier: {tier}")
    target = get_principal(target_id)
    target.merchant_tier = tier
    return target


def search_transfer_candidates(actor: UserProfile, query: str = "", exclude_id: Optional[str] = None,
                               limit: int = 20) -> List[UserProfile]:
    """Merchants and admins eligible to receive a collection."""
    if not is_admin(actor):
        raise PermissionDenied("Only admins can search users for transfer")
    q = UserProfile.query.filter(UserProfile.role.in_(("merchant", "admin")), UserProfile.is_active.is_(True))
    if exclude_id:
        q = q.filter(UserProfile.id != exclude_id)
    if query:
        pattern = f"%{query.lower()}%"
        q = q.filter(or_(
            db.func.lower(UserProfile.identity).like(pattern),
            db.func.lower(db.func.coalesce(UserProfile.display_name, "")).like(pattern),
        ))
    return q.order_by(UserProfile.identity.asc()).limit(limit).all()


def delete_principal(actor: UserProfile, target_id: str) -> None:
    """
    Delete a principal after severing its grants.

    Refuses while the principal still owns any collection: ownership must be
    reassigned first. Does NOT commit.
    """
    if not is_admin(actor):
        raise PermissionDenied("Only admins can delete principals")
    target = get_principal(target_id)
    if _is_bootstrap(target.identity):
        raise InvalidState("The bootstrap admin cannot be deleted")
    owned = Collection.query.filter_by(owner_id=target.id).count()
    if owned:
        raise InvalidState(f"orphaned collection: principal still owns {owned} collection(s)")
    removed = AccessGrant.query.filter_by(user_id=target.id).delete(synchronize_session=False)
    db.session.delete(target)
    logger.info("deleted principal %s (%d grants removed)", target.id, removed)


__all__ = [
    "get_principal",
    "resolve",
    "set_role",
    "set_merchant_tier",
    "search_transfer_candidates",
    "delete_principal",
]
