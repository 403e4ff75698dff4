from datetime import datetime, timedelta, timezone

import jwt
import pytest

from app.errors import InvalidArgument
from app.services import wallet_proof
from app.services.wallet_proof import verify, mint_signed_proof, wallet_from_claims
from app.utils.jwt import create_wallet_proof_token

ADDR = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"


def _past():
    return datetime.now(timezone.utc) - timedelta(minutes=5)


def test_signed_token_for_matching_address(app):
    decision = verify(ADDR, mint_signed_proof(ADDR), {})
    assert decision
    assert decision.reason == "wallet:signed_token"


def test_signed_token_with_epoch_millis_expiry(app):
    expiry = str(int((datetime.now(timezone.utc) + timedelta(minutes=5)).timestamp() * 1000))
    sig = wallet_proof._signature(app.config["WALLET_PROOF_SECRET"], ADDR, expiry)
    token = f"WALLET_VERIFIED_{ADDR}_EXP_{expiry}_SIG_{sig}"
    assert verify(ADDR, token)


def test_signed_token_for_other_address_denied(app):
    assert not verify("other", mint_signed_proof(ADDR), {})


def test_signed_token_with_bad_signature_denied(app):
    forged = mint_signed_proof(ADDR, secret="not-the-secret")
    assert not verify(ADDR, forged)


def test_delegated_token_shapes(app):
    assert verify(ADDR, create_wallet_proof_token(ADDR)).reason == "wallet:delegated_token"
    assert verify(ADDR, create_wallet_proof_token(ADDR, metadata_key="user_metadata"))
    assert verify(ADDR, create_wallet_proof_token(ADDR, metadata_key="app_metadata"))


def test_delegated_token_without_exp_denied(app):
    token = jwt.encode({"wallet_address": ADDR}, app.config["JWT_SECRET"], algorithm="HS256")
    assert not verify(ADDR, token)


def test_expired_token_without_claims_denied(app):
    expired = mint_signed_proof(ADDR, expires_at=_past())
    decision = verify(ADDR, expired, {"sub": "someone"})
    assert not decision
    assert decision.reason == "wallet_unproven"


def test_expired_token_rescued_by_session_claims(app):
    expired = mint_signed_proof(ADDR, expires_at=_past())
    decision = verify(ADDR, expired, {"wallet_address": ADDR})
    assert decision
    assert decision.reason == "wallet:session_claims"

    expired_jwt = create_wallet_proof_token(ADDR, minutes=-5)
    assert verify(ADDR, expired_jwt, {"user_metadata": {"wallet_address": ADDR}})


def test_garbage_tokens_deny_without_raising(app):
    garbage = [
        "garbage",
        "a.b.c",
        "WALLET_VERIFIED_" + ADDR + "_EXP_not-a-date_SIG_" + "0" * 64,
        "WALLET_VERIFIED__EXP__SIG_",
        12345,
        {"wallet_address": ADDR},
    ]
    for token in garbage:
        assert not verify(ADDR, token, {})


def test_non_mapping_claims_are_ignored(app):
    assert not verify(ADDR, None, "wallet_address=" + ADDR)
    assert not verify(ADDR, None, None)


def test_missing_address_denied(app):
    assert verify(None, mint_signed_proof(ADDR)).reason == "no_address"
    assert verify("   ", None, {"wallet_address": ADDR}).reason == "no_address"


def test_failing_channel_falls_through(app, monkeypatch):
    def explode(token, claims, keys, now):
        raise RuntimeError("parser bug")

    monkeypatch.setattr(wallet_proof, "CHANNELS", (
        ("signed_token", explode),
        ("session_claims", wallet_proof.session_claim_proof),
    ))
    assert verify(ADDR, "anything", {"wallet_address": ADDR}).reason == "wallet:session_claims"


def test_wallet_from_claims_search_order():
    claims = {"user_metadata": {"wallet_address": "nested"}, "wallet_address": "top"}
    assert wallet_from_claims(claims) == "top"
    assert wallet_from_claims({"app_metadata": {"wallet_address": " app "}}) == "app"
    assert wallet_from_claims({"wallet_address": ""}) is None


def test_mask_address():
    assert wallet_proof.mask_address(ADDR) == "7xKX...gAsU"
    assert wallet_proof.mask_address("short") == "***"


def test_mint_refuses_addresses_the_token_cannot_carry(app):
    for address in ("bad_address", "two words", ""):
        with pytest.raises(InvalidArgument):
            mint_signed_proof(address)
