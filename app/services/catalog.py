"""Catalog mutations that must pass the permission resolver's write gate."""
import logging
import re
import uuid
from typing import Optional

from app.auth.permissions import WRITER_ROLES
from app.errors import PermissionDenied, InvalidArgument, InvalidState
from app.services import hierarchy, grants
from app.services.permissions import authorize_write
from models import db
from models.access import AccessGrant
from models.catalog import Collection, Category, Product
from models.order import Order
from models.user import UserProfile

logger = logging.getLogger(__name__)


def _slugify(name: str) -> str:
    base = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return f"{base or 'collection'}-{uuid.uuid4().hex[:6]}"


def create_collection(actor: UserProfile, name: str, slug: Optional[str] = None, visible: bool = False) -> Collection:
    """
    Create a collection owned by `actor`.

    The creator also receives an `edit` grant record for audit symmetry.
    Does NOT commit.
    """
    if actor is None or not actor.is_active or actor.role not in WRITER_ROLES:
        raise PermissionDenied("Merchant role or higher required to create collections")
    name = (name or "").strip()
    if not name:
        raise InvalidArgument("Collection name is required")
    slug = slug or _slugify(name)
    if Collection.query.filter_by(slug=slug).first():
        raise InvalidState("Slug already in use")

    collection = Collection(name=name, slug=slug, owner_id=actor.id, created_by=actor.id, visible=visible)
    db.session.add(collection)
    db.session.flush()
    db.session.add(
        AccessGrant(
            user_id=actor.id,
            scope="collection",
            resource_id=collection.id,
            access_level="edit",
            granted_by=actor.id,
        )
    )
    logger.info("collection %s created by %s", collection.id, actor.id)
    return collection


def create_category(actor: UserProfile, collection_id: str, name: str) -> Category:
    collection = hierarchy.get_collection(collection_id)
    authorize_write(actor, collection)
    category = Category(collection_id=collection.id, name=name)
    db.session.add(category)
    db.session.flush()
    return category


def create_product(actor: UserProfile, category_id: str, name: str, sku: Optional[str] = None) -> Product:
    category = hierarchy.load_resource("category", category_id)
    authorize_write(actor, category)
    product = Product(collection_id=category.collection_id, category_id=category.id, name=name, sku=sku)
    db.session.add(product)
    db.session.flush()
    return product


def set_visibility(actor: UserProfile, collection_id: str, visible: bool) -> Collection:
    collection = hierarchy.get_collection(collection_id)
    authorize_write(actor, collection)
    collection.visible = bool(visible)
    return collection


def delete_collection(actor: UserProfile, collection_id: str) -> None:
    """Delete a collection after its grants are gone. Does NOT commit."""
    collection = hierarchy.get_collection(collection_id)
    authorize_write(actor, collection)
    if Order.query.filter_by(collection_id=collection.id).first():
        raise InvalidState("Collection has orders and cannot be deleted")
    removed = grants.delete_for_collection(collection.id)
    Product.query.filter_by(collection_id=collection.id).delete(synchronize_session=False)
    db.session.delete(collection)
    logger.info("collection %s deleted by %s (%d grants removed)", collection_id, actor.id, removed)


__all__ = [
    "create_collection",
    "create_category",
    "create_product",
    "set_visibility",
    "delete_collection",
]
