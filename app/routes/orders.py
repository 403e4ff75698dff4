from flask import Blueprint, current_app
from flask_limiter.util import get_remote_address
from extensions import limiter
from app.version import API_PREFIX
from app.utils import ok, caller_context
from app.services.order_access import list_orders_for, get_order_for

orders_bp = Blueprint("orders", __name__, url_prefix=f"{API_PREFIX}/orders")


@orders_bp.route("", methods=["GET"])
@limiter.limit(
    lambda: current_app.config["WALLET_ORDER_LIMIT_PER_IP"],
    key_func=get_remote_address,
    error_message="Too many order lookups from this IP",
)
def list_orders():
    """Orders visible to the caller. Never an error: no access means an empty list."""
    result = list_orders_for(caller_context())
    return ok({
        "orders": [o.to_dict() for o in result.orders],
        "allowed": result.allowed,
        "paths": result.paths,
    })


@orders_bp.route("/<int:order_id>", methods=["GET"])
def get_order(order_id):
    return ok(get_order_for(caller_context(), order_id).to_dict())
