from app.version import API_PREFIX
from models import db
from models.access import AccessGrant
from models.catalog import Collection


def test_me_requires_token(client):
    resp = client.get(f"{API_PREFIX}/me")
    assert resp.status_code == 401
    assert resp.get_json()["status"] == "error"


def test_me_rejects_garbage_token(client):
    resp = client.get(f"{API_PREFIX}/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "invalid token"


def test_me_provisions_principal(client, auth_header):
    resp = client.get(f"{API_PREFIX}/me", headers=auth_header("new@example.com"))
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["identity"] == "new@example.com"
    assert data["role"] == "user"


def test_me_for_disabled_account(client, make_principal, auth_header):
    make_principal("off@example.com", is_active=False)
    resp = client.get(f"{API_PREFIX}/me", headers=auth_header("off@example.com"))
    assert resp.status_code == 403


def test_create_collection_requires_merchant(client, make_principal, auth_header):
    make_principal("u@example.com")
    resp = client.post(f"{API_PREFIX}/collections", json={"name": "Drops"}, headers=auth_header("u@example.com"))
    assert resp.status_code == 403


def test_create_collection_seeds_edit_grant(client, make_principal, auth_header):
    merchant = make_principal("m@example.com", role="merchant")
    resp = client.post(
        f"{API_PREFIX}/collections",
        json={"name": "Winter Drop", "slug": "winter-drop"},
        headers=auth_header("m@example.com"),
    )
    assert resp.status_code == 201
    body = resp.get_json()["data"]
    assert body["owner_id"] == merchant.id
    assert body["visible"] is False
    grant = AccessGrant.query.filter_by(user_id=merchant.id, resource_id=body["id"]).one()
    assert grant.access_level == "edit"

    dup = client.post(
        f"{API_PREFIX}/collections",
        json={"name": "Again", "slug": "winter-drop"},
        headers=auth_header("m@example.com"),
    )
    assert dup.status_code == 409


def test_create_collection_validation(client, make_principal, auth_header):
    make_principal("m@example.com", role="merchant")
    resp = client.post(f"{API_PREFIX}/collections", json={}, headers=auth_header("m@example.com"))
    assert resp.status_code == 422
    assert resp.get_json()["errors"]


def test_grant_check_and_revoke_flow(client, make_principal, make_collection, auth_header):
    owner = make_principal("m@example.com", role="merchant")
    helper = make_principal("h@example.com")
    collection, _, _ = make_collection(owner)
    owner_hdr, helper_hdr = auth_header("m@example.com"), auth_header("h@example.com")
    check_body = {"resource_type": "collection", "resource_id": collection.id, "level": "view"}

    resp = client.post(f"{API_PREFIX}/access/check", json=check_body, headers=helper_hdr)
    assert resp.get_json()["data"] == {"allowed": False, "reason": "denied"}

    grant_body = {"principal_id": helper.id, "scope": "collection", "resource_id": collection.id, "level": "view"}
    resp = client.post(f"{API_PREFIX}/access/grants", json=grant_body, headers=owner_hdr)
    assert resp.status_code == 200
    assert resp.get_json()["data"]["access_level"] == "view"

    resp = client.post(f"{API_PREFIX}/access/check", json=check_body, headers=helper_hdr)
    assert resp.get_json()["data"] == {"allowed": True, "reason": "grant:collection"}

    mine = client.get(f"{API_PREFIX}/access/grants/mine", headers=helper_hdr).get_json()["data"]["grants"]
    assert [g["resource_id"] for g in mine] == [collection.id]

    revoke_body = {k: grant_body[k] for k in ("principal_id", "scope", "resource_id")}
    resp = client.delete(f"{API_PREFIX}/access/grants", json=revoke_body, headers=owner_hdr)
    assert resp.get_json()["data"] == {"removed": True}
    resp = client.delete(f"{API_PREFIX}/access/grants", json=revoke_body, headers=owner_hdr)
    assert resp.get_json()["data"] == {"removed": False}


def test_grant_by_stranger_is_forbidden(client, make_principal, make_collection, auth_header):
    owner = make_principal("m@example.com", role="merchant")
    make_principal("x@example.com", role="merchant")
    collection, _, _ = make_collection(owner)
    body = {"principal_id": owner.id, "scope": "collection", "resource_id": collection.id, "level": "edit"}
    resp = client.post(f"{API_PREFIX}/access/grants", json=body, headers=auth_header("x@example.com"))
    assert resp.status_code == 403
    assert resp.get_json()["code"] == 403


def test_check_unknown_resource_is_404(client, make_principal, auth_header):
    make_principal("u@example.com")
    body = {"resource_type": "product", "resource_id": "nope"}
    resp = client.post(f"{API_PREFIX}/access/check", json=body, headers=auth_header("u@example.com"))
    assert resp.status_code == 404


def test_visibility_toggle_and_delete(client, make_principal, make_collection, auth_header):
    owner = make_principal("m@example.com", role="merchant")
    make_principal("u@example.com")
    collection, _, _ = make_collection(owner)
    cid = collection.id

    resp = client.patch(f"{API_PREFIX}/collections/{cid}/visibility", json={"visible": True},
                        headers=auth_header("u@example.com"))
    assert resp.status_code == 403

    resp = client.patch(f"{API_PREFIX}/collections/{cid}/visibility", json={"visible": True},
                        headers=auth_header("m@example.com"))
    assert resp.status_code == 200
    assert resp.get_json()["data"]["visible"] is True

    resp = client.delete(f"{API_PREFIX}/collections/{cid}", headers=auth_header("m@example.com"))
    assert resp.status_code == 200
    db.session.expire_all()
    assert db.session.get(Collection, cid) is None


def test_delete_collection_with_orders_conflicts(client, make_principal, make_collection, make_order, auth_header):
    owner = make_principal("m@example.com", role="merchant")
    collection, _, product = make_collection(owner)
    make_order(product, "Wallet123456789")
    resp = client.delete(f"{API_PREFIX}/collections/{collection.id}", headers=auth_header("m@example.com"))
    assert resp.status_code == 409


def test_transfer_route(client, make_principal, make_collection, auth_header):
    make_principal("a@example.com", role="admin")
    owner = make_principal("m1@example.com", role="merchant")
    heir = make_principal("m2@example.com", role="merchant")
    collection, _, _ = make_collection(owner)
    url = f"{API_PREFIX}/collections/{collection.id}/transfer"

    resp = client.post(url, json={"new_owner_id": heir.id}, headers=auth_header("m1@example.com"))
    assert resp.status_code == 403

    resp = client.post(url, json={"new_owner_id": heir.id}, headers=auth_header("a@example.com"))
    assert resp.status_code == 200
    assert resp.get_json()["data"]["new_owner_id"] == heir.id

    resp = client.post(url, json={"new_owner_id": heir.id}, headers=auth_header("a@example.com"))
    assert resp.status_code == 409

    details = client.get(f"{API_PREFIX}/collections/{collection.id}/access", headers=auth_header("m2@example.com"))
    assert details.status_code == 200
    data = details.get_json()["data"]
    assert data["owner"]["id"] == heir.id
    assert [(g["user_id"], g["access_level"]) for g in data["grants"]] == [(owner.id, "edit")]
