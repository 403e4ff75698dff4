"""Order access facade: the only read path external callers use for orders."""
import logging
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from app.errors import NotFound
from app.services import hierarchy, permissions, wallet_proof
from models import db
from models.access import AccessGrant
from models.catalog import Product
from models.order import Order
from models.user import UserProfile

logger = logging.getLogger(__name__)


@dataclass
class CallerContext:
    principal: Optional[UserProfile] = None
    wallet_address: Optional[str] = None
    proof_token: Optional[str] = None
    session_claims: Mapping = field(default_factory=dict)


@dataclass
class OrderAccessResult:
    allowed: bool
    orders: List[Order]
    paths: List[str] = field(default_factory=list)


def _ordered(query):
    return query.order_by(Order.created_at.desc(), Order.id.desc())


def _staff_candidates(principal: UserProfile) -> Optional[List[Order]]:
    """
    Orders under anything the principal owns or holds a grant on.

    None when the principal owns nothing and holds no grant.
    """
    grants = AccessGrant.query.filter_by(user_id=principal.id).all()
    collection_ids = set(hierarchy.collections_owned_by(principal.id))
    if not grants and not collection_ids:
        return None
    category_ids, product_ids = set(), set()
    for g in grants:
        if g.scope == "collection":
            collection_ids.add(g.resource_id)
        elif g.scope == "category":
            category_ids.add(g.resource_id)
        elif g.scope == "product":
            product_ids.add(g.resource_id)
    if category_ids:
        product_ids.update(
            r[0] for r in db.session.query(Product.id).filter(Product.category_id.in_(category_ids)).all()
        )

    clauses = []
    if collection_ids:
        clauses.append(Order.collection_id.in_(collection_ids))
    if product_ids:
        clauses.append(Order.product_id.in_(product_ids))
    if not clauses:
        return []
    return _ordered(Order.query.filter(or_(*clauses))).all()


def _staff_orders(principal: Optional[UserProfile]) -> Optional[List[Order]]:
    if principal is None or not principal.is_active:
        return None
    if principal.role == "admin":
        return _ordered(Order.query).all()
    candidates = _staff_candidates(principal)
    if candidates is None:
        return None
    return [o for o in candidates if permissions.check(principal, o, "view")]


def _wallet_orders(ctx: CallerContext) -> Optional[List[Order]]:
    if not ctx.wallet_address:
        return None
    decision = wallet_proof.verify(ctx.wallet_address, ctx.proof_token, ctx.session_claims)
    if not decision:
        return None
    return _ordered(Order.query.filter_by(wallet_address=ctx.wallet_address.strip())).all()


def _safely(path: str, fn, *args) -> Optional[List[Order]]:
    try:
        return fn(*args)
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("order path %s failed in storage", path)
    except Exception:
        logger.exception("order path %s failed", path)
    return None


def list_orders_for(ctx: CallerContext) -> OrderAccessResult:
    """
    Union of the staff path and the wallet path.

    A staff member who is also a buyer sees both sets. `paths` names every
    path that authorized the caller, even when it found no orders. A failing
    path only contributes nothing; this never raises.
    """
    seen = {}
    paths = []
    for path, fn, arg in (("staff", _staff_orders, ctx.principal), ("wallet", _wallet_orders, ctx)):
        rows = _safely(path, fn, arg)
        if rows is not None:
            paths.append(path)
            for order in rows:
                seen.setdefault(order.id, order)

    orders = sorted(
        seen.values(),
        key=lambda o: (o.created_at is not None, o.created_at, o.id),
        reverse=True,
    )
    return OrderAccessResult(allowed=bool(paths), orders=orders, paths=paths)


def can_read_order(ctx: CallerContext, order: Order) -> bool:
    if order is None:
        return False
    if ctx.principal is not None and permissions.check(ctx.principal, order, "view"):
        return True
    if ctx.wallet_address and order.wallet_address == ctx.wallet_address.strip():
        return bool(wallet_proof.verify(ctx.wallet_address, ctx.proof_token, ctx.session_claims))
    return False


def get_order_for(ctx: CallerContext, order_id: int) -> Order:
    """The order if visible to the caller; NotFound otherwise so existence is not leaked."""
    order = db.session.get(Order, order_id)
    if not can_read_order(ctx, order):
        raise NotFound("Order not found")
    return order


__all__ = [
    "CallerContext",
    "OrderAccessResult",
    "list_orders_for",
    "can_read_order",
    "get_order_for",
]
