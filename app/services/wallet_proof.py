"""
Wallet proof verifier for buyers who hold no account.

A request proves control of a wallet address through an ordered list of
channels. Each channel is a plain function returning the wallet address it
could establish, or None. Channels never decide on their own; `verify`
compares what they return with the claimed address and stops at the first
match. A channel that blows up on garbage input counts as a miss.

Supported proof token shapes:

- signed string: ``WALLET_VERIFIED_<address>_EXP_<expiry>_SIG_<hmac>`` where
  expiry is epoch milliseconds or an ISO-8601 timestamp and the HMAC-SHA256
  covers ``<address>|<expiry>`` with WALLET_PROOF_SECRET
- delegated token: an HS256 JWT signed with JWT_SECRET carrying a
  ``wallet_address`` claim at top level or under user_metadata/app_metadata

This only checks that a previously issued token matches the address and has
not expired. Signature verification of the wallet key itself happens when
the token is minted.
"""
import hashlib
import hmac
import logging
import re
from collections import namedtuple
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional

import jwt
from flask import current_app

from app.auth.decision import Decision, allow, deny
from app.errors import InvalidArgument
from app.metrics import record_wallet_verification

logger = logging.getLogger(__name__)

SIGNED_TOKEN_RE = re.compile(
    r"^WALLET_VERIFIED_(?P<address>[^_\s]+)_EXP_(?P<expiry>[^_\s]+)_SIG_(?P<sig>[0-9a-fA-F]{64})$"
)

# addresses the signed-string shape can carry back out
SIGNED_ADDRESS_RE = re.compile(r"[^_\s]+")

CLAIM_LOCATIONS = (None, "user_metadata", "app_metadata")

VerifierKeys = namedtuple("VerifierKeys", ["proof_secret", "jwt_secret"])


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_expiry(text: str) -> datetime:
    if text.isdigit():
        return datetime.fromtimestamp(int(text) / 1000, tz=timezone.utc)
    value = text[:-1] + "+00:00" if text.endswith("Z") else text
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _signature(secret: str, address: str, expiry: str) -> str:
    return hmac.new(secret.encode(), f"{address}|{expiry}".encode(), hashlib.sha256).hexdigest()


def wallet_from_claims(claims: Any) -> Optional[str]:
    """Wallet address from a claims mapping, searching the known locations in order."""
    if not isinstance(claims, Mapping):
        return None
    for location in CLAIM_LOCATIONS:
        source = claims if location is None else claims.get(location)
        if isinstance(source, Mapping):
            value = source.get("wallet_address")
            if isinstance(value, str) and value.strip():
                return value.strip()
    return None


# --- channels ---

def signed_string_proof(token, claims, keys: VerifierKeys, now: datetime) -> Optional[str]:
    if not isinstance(token, str):
        return None
    match = SIGNED_TOKEN_RE.match(token.strip())
    if not match:
        return None
    address, expiry = match.group("address"), match.group("expiry")
    if _parse_expiry(expiry) < now:
        return None
    if not keys.proof_secret:
        return None
    if not hmac.compare_digest(_signature(keys.proof_secret, address, expiry), match.group("sig").lower()):
        return None
    return address


def delegated_token_proof(token, claims, keys: VerifierKeys, now: datetime) -> Optional[str]:
    if not isinstance(token, str) or token.count(".") != 2 or not keys.jwt_secret:
        return None
    try:
        data = jwt.decode(
            token.strip(),
            keys.jwt_secret,
            algorithms=["HS256"],
            options={"require": ["exp"], "verify_exp": False},
        )
    except jwt.InvalidTokenError:
        return None
    if datetime.fromtimestamp(int(data["exp"]), tz=timezone.utc) < now:
        return None
    return wallet_from_claims(data)


def session_claim_proof(token, claims, keys: VerifierKeys, now: datetime) -> Optional[str]:
    return wallet_from_claims(claims)


CHANNELS = (
    ("signed_token", signed_string_proof),
    ("delegated_token", delegated_token_proof),
    ("session_claims", session_claim_proof),
)


def _keys() -> VerifierKeys:
    cfg = current_app.config
    return VerifierKeys(cfg.get("WALLET_PROOF_SECRET"), cfg.get("JWT_SECRET"))


def verify(claimed_wallet_address: Optional[str], proof_token: Optional[str] = None,
           session_claims: Optional[Mapping] = None, now: Optional[datetime] = None) -> Decision:
    """Allow when any channel proves `claimed_wallet_address`; never raises."""
    if not isinstance(claimed_wallet_address, str) or not claimed_wallet_address.strip():
        record_wallet_verification("none", False)
        return deny("no_address")
    claimed = claimed_wallet_address.strip()
    now = now or _utcnow()

    try:
        keys = _keys()
    except Exception:
        logger.exception("wallet verifier misconfigured; denying")
        record_wallet_verification("none", False)
        return deny("error")

    for name, channel in CHANNELS:
        try:
            proven = channel(proof_token, session_claims, keys, now)
        except Exception as e:
            logger.debug("wallet channel %s failed: %s", name, e)
            proven = None
        if proven is not None and proven == claimed:
            record_wallet_verification(name, True)
            return allow(f"wallet:{name}")

    record_wallet_verification("none", False)
    logger.info("wallet proof rejected for %s", mask_address(claimed))
    return deny("wallet_unproven")


def mask_address(address: str) -> str:
    if not address or len(address) <= 10:
        return "***"
    return f"{address[:4]}...{address[-4:]}"


def mint_signed_proof(wallet_address: str, expires_at: Optional[datetime] = None, secret: Optional[str] = None) -> str:
    """Issue a signed-string proof token; used by the wallet sign-in flow and tests."""
    if not wallet_address or not SIGNED_ADDRESS_RE.fullmatch(wallet_address):
        raise InvalidArgument("Wallet address cannot be embedded in a signed proof token")
    if expires_at is None:
        expires_at = _utcnow() + timedelta(minutes=current_app.config["WALLET_PROOF_LIFETIME_MIN"])
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    expiry = expires_at.astimezone(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")
    secret = secret or current_app.config["WALLET_PROOF_SECRET"]
    return f"WALLET_VERIFIED_{wallet_address}_EXP_{expiry}_SIG_{_signature(secret, wallet_address, expiry)}"


__all__ = [
    "CHANNELS",
    "verify",
    "wallet_from_claims",
    "mint_signed_proof",
    "mask_address",
    "signed_string_proof",
    "delegated_token_proof",
    "session_claim_proof",
]
