from functools import wraps
from flask import request, g
from .responses import error
from .jwt import decode_token, TokenError

WALLET_ADDRESS_HEADER = "X-Wallet-Address"
WALLET_TOKEN_HEADER = "X-Wallet-Auth-Token"


def _bearer_token():
    auth = request.headers.get("Authorization", "")
    if not auth:
        return None
    return auth.split(" ", 1)[1] if auth.startswith("Bearer ") else auth


def load_caller():
    """
    Populate g with whatever the request carries: session claims, the
    resolved principal, and the wallet address/proof token pair.

    An unusable session token is not an error here; callers that need a
    principal use auth_required.
    """
    from app.services.principals import resolve

    g.principal = None
    g.session_claims = {}
    g.token_error = None
    token = _bearer_token()
    if token:
        try:
            payload = decode_token(token, expected_type=None)
        except TokenError as e:
            g.token_error = str(e)
        else:
            g.session_claims = payload
            if payload.get("type") == "access" and payload.get("sub"):
                g.principal = resolve(payload["sub"])

    g.wallet_address = (request.headers.get(WALLET_ADDRESS_HEADER) or "").strip() or None
    g.proof_token = (request.headers.get(WALLET_TOKEN_HEADER) or "").strip() or None


def caller_context():
    from app.services.order_access import CallerContext

    return CallerContext(
        principal=getattr(g, "principal", None),
        wallet_address=getattr(g, "wallet_address", None),
        proof_token=getattr(g, "proof_token", None),
        session_claims=getattr(g, "session_claims", {}) or {},
    )


def auth_required(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        if not hasattr(g, "principal"):
            load_caller()
        if g.principal is None:
            if g.token_error:
                return error(g.token_error, status=401)
            return error("Auth header missing", status=401)
        if not g.principal.is_active:
            return error("Account disabled", status=403)
        return func(*args, **kwargs)

    return wrapper


def _to_set(obj):
    return set(obj) if isinstance(obj, (list, tuple, set)) else {obj}


def role_required(required):
    """Authorize on the role resolved from the principal directory, never from token claims."""
    required_set = _to_set(required)

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            principal = getattr(g, "principal", None)
            role = getattr(principal, "role", None)
            if not role:
                return error("Role missing", status=403)
            if role not in required_set:
                return error("Forbidden", status=403)
            return fn(*args, **kwargs)

        return wrapper

    return decorator
