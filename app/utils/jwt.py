import datetime as dt
from typing import Dict, Optional
import jwt
from flask import current_app


def _secret() -> str:
    return current_app.config["JWT_SECRET"]


def _utcnow():
    return dt.datetime.utcnow()


def _exp(minutes: int = None, days: int = None):
    now = _utcnow()
    if minutes:
        return now + dt.timedelta(minutes=minutes)
    if days:
        return now + dt.timedelta(days=days)
    raise ValueError("must supply minutes or days")


def create_access_token(identity: str, wallet_address: Optional[str] = None) -> str:
    """Session token for a signed-in principal.

    Role is deliberately absent: it is looked up per request from the
    principal directory.
    """
    cfg = current_app.config
    payload: Dict = {
        "sub": identity,
        "type": "access",
        "exp": _exp(minutes=cfg["ACCESS_TOKEN_LIFETIME_MIN"]),
    }
    if wallet_address:
        payload["wallet_address"] = wallet_address
    return jwt.encode(payload, _secret(), algorithm="HS256")


def create_wallet_session_token(wallet_address: str) -> str:
    """Session for a buyer who completed wallet sign-in; carries no principal."""
    cfg = current_app.config
    payload = {
        "type": "wallet_session",
        "wallet_address": wallet_address,
        "exp": _exp(minutes=cfg["ACCESS_TOKEN_LIFETIME_MIN"]),
    }
    return jwt.encode(payload, _secret(), algorithm="HS256")


def create_wallet_proof_token(wallet_address: str, minutes: int = None, metadata_key: str = None) -> str:
    """Delegated session-claim proof token.

    `metadata_key` nests the address under `user_metadata`/`app_metadata`
    the way upstream identity providers do.
    """
    cfg = current_app.config
    lifetime = minutes if minutes is not None else cfg["WALLET_PROOF_LIFETIME_MIN"]
    payload: Dict = {
        "type": "wallet_proof",
        "exp": _utcnow() + dt.timedelta(minutes=lifetime),
    }
    if metadata_key:
        payload[metadata_key] = {"wallet_address": wallet_address}
    else:
        payload["wallet_address"] = wallet_address
    return jwt.encode(payload, _secret(), algorithm="HS256")


class TokenError(Exception):
    pass


def decode_token(token: str, expected_type: Optional[str] = "access") -> Dict:
    try:
        data = jwt.decode(token, _secret(), algorithms=["HS256"])
    except jwt.ExpiredSignatureError:
        raise TokenError("token expired")
    except jwt.InvalidTokenError:
        raise TokenError("invalid token")

    if expected_type is not None and data.get("type") != expected_type:
        raise TokenError(f"expected {expected_type} token")
    return data
