"""
Read-mostly view of the collection -> category -> product -> order tree,
plus collection ownership.

Lookups here carry no authorization logic of their own; the permission
resolver composes them. The only mutation, ownership transfer, is
admin-gated.
"""
import logging
from datetime import datetime
from typing import List, Tuple

from sqlalchemy import update

from app.auth.permissions import is_admin, role_at_least
from app.errors import PermissionDenied, NotFound, InvalidArgument, InvalidState
from models import db
from models.access import AccessGrant
from models.catalog import Collection, Category, Product, OwnershipTransferLog
from models.order import Order
from models.user import UserProfile

logger = logging.getLogger(__name__)

RESOURCE_MODELS = {
    "collection": Collection,
    "category": Category,
    "product": Product,
    "order": Order,
}


def load_resource(kind: str, resource_id):
    model = RESOURCE_MODELS.get(kind)
    if model is None:
        raise InvalidArgument(f"Unknown resource type: {kind}")
    if model is Order and isinstance(resource_id, str):
        if not resource_id.isdigit():
            raise NotFound("Order not found")
        resource_id = int(resource_id)
    resource =db.session.get(model, resource_id) if resource_id is not None else None
    if resource is None:
        raise NotFound(f"{kind.capitalize()} not found")
    return resource


def get_collection(collection_id: str) -> Collection:
    return load_resource("collection", collection_id)


def collection_id_of(resource) -> str:
    if isinstance(resource, Collection):
        return resource.id
    return resource.collection_id


def scope_chain(resource) -> List[Tuple[str, str]]:
    """
    Grant scopes containing `resource`, most specific first, ending at its collection.

    An order is contained by its product's chain.
    """
    if isinstance(resource, Order):
        product = db.session.get(Product, resource.product_id)
        if product is None:
            return [("collection", resource.collection_id)]
        resource = product
    if isinstance(resource, Product):
        chain = [("product", resource.id)]
        if resource.category_id:
            chain.append(("category", resource.category_id))
        chain.append(("collection", resource.collection_id))
        return chain
    if isinstance(resource, Category):
        return [("category", resource.id), ("collection", resource.collection_id)]
    if isinstance(resource, Collection):
        return [("collection", resource.id)]
    raise InvalidArgument(f"Unsupported resource type: {type(resource).__name__}")


def owner_of(collection_id: str) -> str:
    row = db.session.query(Collection.owner_id).filter(Collection.id == collection_id).first()
    if row is None:
        raise NotFound("Collection not found")
    return row[0]


def visibility_of(collection_id: str) -> bool:
    """Categories and products inherit this flag unchanged."""
    row = db.session.query(Collection.visible).filter(Collection.id == collection_id).first()
    if row is None:
        raise NotFound("Collection not found")
    return bool(row[0])


def descendant_ids(collection_id: str) -> Tuple[List[str], List[str]]:
    category_ids = [r[0] for r in db.session.query(Category.id).filter_by(collection_id=collection_id).all()]
    product_ids = [r[0] for r in db.session.query(Product.id).filter_by(collection_id=collection_id).all()]
    return category_ids, product_ids


def collections_owned_by(principal_id: str) -> List[str]:
    return [r[0] for r in db.session.query(Collection.id).filter_by(owner_id=principal_id).all()]


def transfer_ownership(actor: UserProfile, collection_id: str, new_owner_id: str) -> OwnershipTransferLog:
    """
    Atomically hand a collection to `new_owner_id`.

    The owner swap is a compare-and-set on (owner_id, version) so two
    concurrent transfers cannot both succeed. The previous owner keeps an
    `edit` grant on the collection. Does NOT commit.
    """
    if not is_admin(actor):
        raise PermissionDenied("Only admins can transfer collection ownership")

    collection = get_collection(collection_id)
    old_owner_id, version = collection.owner_id, collection.version
    if new_owner_id == old_owner_id:
        raise InvalidState("User is already the owner of this collection")

    new_owner = db.session.get(UserProfile, new_owner_id) if new_owner_id else None
    if new_owner is None:
        raise NotFound("New owner not found")
    if not role_at_least(new_owner.role, "merchant") or not new_owner.is_active:
        raise InvalidState("User must have merchant role or higher to own collections")

    result = db.session.execute(
        update(Collection)
        .where(
            Collection.id == collection_id,
            Collection.owner_id == old_owner_id,
            Collection.version == version,
        )
        .values(owner_id=new_owner_id, version=version + 1, updated_at=datetime.utcnow())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise InvalidState("Collection ownership changed concurrently; retry")
    db.session.expire(collection)

    AccessGrant.query.filter_by(
        user_id=old_owner_id, scope="collection", resource_id=collection_id
    ).delete(synchronize_session=False)
    db.session.add(
        AccessGrant(
            user_id=old_owner_id,
            scope="collection",
            resource_id=collection_id,
            access_level="edit",
            granted_by=actor.id,
        )
    )
    log = OwnershipTransferLog(
        collection_id=collection_id,
        old_owner_id=old_owner_id,
        new_owner_id=new_owner_id,
        actor_id=actor.id,
    )
    db.session.add(log)
    logger.info("collection %s transferred from %s to %s", collection_id, old_owner_id, new_owner_id)
    return log


__all__ = [
    "RESOURCE_MODELS",
    "load_resource",
    "get_collection",
    "collection_id_of",
    "scope_chain",
    "owner_of",
    "visibility_of",
    "descendant_ids",
    "collections_owned_by",
    "transfer_ownership",
]
