"""
Explicit per-user access grants on collections, categories and products.

At most one grant exists per (principal, scope, resource). Re-granting
overwrites the level; revoking a missing grant is a no-op.
"""
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import or_, and_
from sqlalchemy.exc import IntegrityError

from app.auth.permissions import GRANT_SCOPES, ACCESS_LEVELS, is_admin
from app.errors import PermissionDenied, NotFound, InvalidArgument, InvalidState
from app.services import hierarchy
from models import db
from models.access import AccessGrant
from models.user import UserProfile

logger = logging.getLogger(__name__)

UPSERT_ATTEMPTS = 2


def _validate_scope(scope: str, resource_id: str):
    if scope not in GRANT_SCOPES:
        raise InvalidArgument(f"Invalid grant scope: {scope}")
    return hierarchy.load_resource(scope, resource_id)


def _authorize_manager(actor: UserProfile, resource) -> None:
    """Admins, or the current owner of the resource's collection."""
    if actor is None:
        raise PermissionDenied("Authentication required")
    if is_admin(actor):
        return
    collection_id = hierarchy.collection_id_of(resource)
    if actor.is_active and hierarchy.owner_of(collection_id) == actor.id:
        return
    raise PermissionDenied("Only admins or collection owners can manage access")


def find_grant(principal_id: str, scope: str, resource_id: str) -> Optional[AccessGrant]:
    return AccessGrant.query.filter_by(user_id=principal_id, scope=scope, resource_id=resource_id).first()


def grants_for_chain(principal_id: str, chain: Sequence[Tuple[str, str]]) -> Dict[Tuple[str, str], AccessGrant]:
    """All of the principal's grants whose scope key appears in `chain`, in one query."""
    if not chain:
        return {}
    clauses = [and_(AccessGrant.scope == s, AccessGrant.resource_id == rid) for s, rid in chain]
    rows = AccessGrant.query.filter(AccessGrant.user_id == principal_id, or_(*clauses)).all()
    return {(g.scope, g.resource_id): g for g in rows}


def grant(actor: UserProfile, principal_id: str, scope: str, resource_id: str, level: str) -> AccessGrant:
    """Upsert a grant. Does NOT commit."""
    if level not in ACCESS_LEVELS:
        raise InvalidArgument(f"Invalid access level: {level}")
    resource = _validate_scope(scope, resource_id)
    _authorize_manager(actor, resource)
    if db.session.get(UserProfile, principal_id) is None:
        raise NotFound("Principal not found")

    for _ in range(UPSERT_ATTEMPTS):
        existing = find_grant(principal_id, scope, resource_id)
        if existing:
            existing.access_level = level
            existing.granted_by = actor.id
            logger.info("grant %s:%s for %s updated to %s", scope, resource_id, principal_id, level)
            return existing

        record = AccessGrant(
            user_id=principal_id,
            scope=scope,
            resource_id=resource_id,
            access_level=level,
            granted_by=actor.id,
        )
        try:
            with db.session.begin_nested():
                db.session.add(record)
        except IntegrityError:
            # concurrent upsert won the insert; retry as an update, last writer wins
            logger.info("grant %s:%s for %s inserted concurrently; retrying", scope, resource_id, principal_id)
            continue
        logger.info("granted %s on %s:%s to %s", level, scope, resource_id, principal_id)
        return record

    raise InvalidState("Grant changed concurrently; retry")


def revoke(actor: UserProfile, principal_id: str, scope: str, resource_id: str) -> bool:
    """Remove a grant. Returns False when there was nothing to remove. Does NOT commit."""
    resource = _validate_scope(scope, resource_id)
    _authorize_manager(actor, resource)
    removed = AccessGrant.query.filter_by(
        user_id=principal_id, scope=scope, resource_id=resource_id
    ).delete(synchronize_session=False)
    if removed:
        logger.info("revoked %s:%s from %s", scope, resource_id, principal_id)
    return bool(removed)


def list_for_principal(principal_id: str) -> List[AccessGrant]:
    return (
        AccessGrant.query.filter_by(user_id=principal_id)
        .order_by(AccessGrant.granted_at.desc())
        .all()
    )


def list_for_resource(scope: str, resource_id: str, include_descendants: bool = False) -> List[AccessGrant]:
    if scope not in GRANT_SCOPES:
        raise InvalidArgument(f"Invalid grant scope: {scope}")
    clauses = [and_(AccessGrant.scope == scope, AccessGrant.resource_id == resource_id)]
    if include_descendants and scope == "collection":
        category_ids, product_ids = hierarchy.descendant_ids(resource_id)
        if category_ids:
            clauses.append(and_(AccessGrant.scope == "category", AccessGrant.resource_id.in_(category_ids)))
        if product_ids:
            clauses.append(and_(AccessGrant.scope == "product", AccessGrant.resource_id.in_(product_ids)))
    return AccessGrant.query.filter(or_(*clauses)).order_by(AccessGrant.granted_at.desc()).all()


def delete_for_collection(collection_id: str) -> int:
    """Cascade: drop every grant scoped to the collection or anything under it. Does NOT commit."""
    category_ids, product_ids = hierarchy.descendant_ids(collection_id)
    removed = AccessGrant.query.filter_by(scope="collection", resource_id=collection_id).delete(
        synchronize_session=False
    )
    if category_ids:
        removed += AccessGrant.query.filter(
            AccessGrant.scope == "category", AccessGrant.resource_id.in_(category_ids)
        ).delete(synchronize_session=False)
    if product_ids:
        removed += AccessGrant.query.filter(
            AccessGrant.scope == "product", AccessGrant.resource_id.in_(product_ids)
        ).delete(synchronize_session=False)
    return removed


def access_details(actor: UserProfile, collection_id: str) -> dict:
    """Owner summary and every grant on the collection and its descendants."""
    collection = hierarchy.get_collection(collection_id)
    _authorize_manager(actor, collection)
    owner = db.session.get(UserProfile, collection.owner_id)
    return {
        "collection_id": collection.id,
        "collection_name": collection.name,
        "owner": {
            "id": owner.id,
            "display_name": owner.display_name or "",
            "merchant_tier": owner.merchant_tier,
        } if owner else None,
        "grants": [g.to_dict() for g in list_for_resource("collection", collection.id, include_descendants=True)],
    }


__all__ = [
    "find_grant",
    "grants_for_chain",
    "grant",
    "revoke",
    "list_for_principal",
    "list_for_resource",
    "delete_for_collection",
    "access_details",
]
