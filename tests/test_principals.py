import pytest

from app.errors import PermissionDenied, InvalidArgument, InvalidState, NotFound
from app.services import principals, hierarchy
from models import db
from models.access import AccessGrant
from models.user import UserProfile


def test_resolve_provisions_user_once(app):
    first = principals.resolve("buyer@example.com")
    second = principals.resolve("buyer@example.com")
    assert first.id == second.id
    assert first.role == "user"
    assert UserProfile.query.filter_by(identity="buyer@example.com").count() == 1


def test_resolve_bootstrap_identity_is_admin(app):
    user = principals.resolve("root@test.local")
    assert user.role == "admin"


def test_resolve_reelevates_demoted_bootstrap_record(app, make_principal):
    make_principal("root@test.local", role="user")
    assert principals.resolve("root@test.local").role == "admin"


def test_resolve_keeps_elevated_role(app, make_principal):
    make_principal("m@example.com", role="merchant")
    assert principals.resolve("m@example.com").role == "merchant"


def test_resolve_requires_identity(app):
    with pytest.raises(NotFound):
        principals.resolve("  ")


def test_set_role_requires_admin(app, make_principal):
    merchant = make_principal("m@example.com", role="merchant")
    target = make_principal("u@example.com")
    with pytest.raises(PermissionDenied):
        principals.set_role(merchant, target.id, "merchant")


def test_set_role_rejects_unknown_role(app, make_principal):
    admin = make_principal("a@example.com", role="admin")
    target = make_principal("u@example.com")
    with pytest.raises(InvalidArgument):
        principals.set_role(admin, target.id, "superuser")


def test_set_role_updates_role(app, make_principal):
    admin = make_principal("a@example.com", role="admin")
    target = make_principal("u@example.com")
    principals.set_role(admin, target.id, "merchant")
    db.session.commit()
    assert db.session.get(UserProfile, target.id).role == "merchant"


def test_bootstrap_admin_cannot_be_demoted(app, make_principal):
    admin = make_principal("a@example.com", role="admin")
    root = principals.resolve("root@test.local")
    with pytest.raises(InvalidState):
        principals.set_role(admin, root.id, "user")


def test_owner_cannot_drop_below_merchant(app, make_principal, make_collection):
    admin = make_principal("a@example.com", role="admin")
    owner = make_principal("m@example.com", role="merchant")
    make_collection(owner)
    with pytest.raises(InvalidState):
        principals.set_role(admin, owner.id, "intern")


def test_set_merchant_tier(app, make_principal):
    admin = make_principal("a@example.com", role="admin")
    merchant = make_principal("m@example.com", role="merchant")
    principals.set_merchant_tier(admin, merchant.id, "trusted_merchant")
    assert merchant.merchant_tier == "trusted_merchant"
    with pytest.raises(InvalidArgument):
        principals.set_merchant_tier(admin, merchant.id, "platinum")
    with pytest.raises(PermissionDenied):
        principals.set_merchant_tier(merchant, merchant.id, "elite_merchant")


def test_search_transfer_candidates_only_merchants_and_admins(app, make_principal):
    admin = make_principal("a@example.com", role="admin")
    make_principal("shop-one@example.com", role="merchant", display_name="Shop One")
    make_principal("shop-two@example.com", role="user")
    found = principals.search_transfer_candidates(admin, "shop")
    assert [u.identity for u in found] == ["shop-one@example.com"]

    everyone = principals.search_transfer_candidates(admin, exclude_id=admin.id)
    assert admin.id not in {u.id for u in everyone}


def test_delete_principal_refuses_orphaned_collection(app, make_principal, make_collection):
    admin = make_principal("a@example.com", role="admin")
    owner = make_principal("m@example.com", role="merchant")
    make_collection(owner)
    with pytest.raises(InvalidState) as exc:
        principals.delete_principal(admin, owner.id)
    assert "orphaned collection" in exc.value.message


def test_delete_principal_after_transfer_severs_grants(app, make_principal, make_collection):
    admin = make_principal("a@example.com", role="admin")
    owner = make_principal("m@example.com", role="merchant")
    heir = make_principal("m2@example.com", role="merchant")
    collection, _, _ = make_collection(owner)

    hierarchy.transfer_ownership(admin, collection.id, heir.id)
    db.session.commit()
    assert AccessGrant.query.filter_by(user_id=owner.id).count() == 1

    principals.delete_principal(admin, owner.id)
    db.session.commit()
    assert db.session.get(UserProfile, owner.id) is None
    assert AccessGrant.query.filter_by(user_id=owner.id).count() == 0


def test_bootstrap_admin_cannot_be_deleted(app, make_principal):
    admin = make_principal("a@example.com", role="admin")
    root = principals.resolve("root@test.local")
    with pytest.raises(InvalidState):
        principals.delete_principal(admin, root.id)


def test_resolve_without_bootstrap_identity_elevates_nobody(app, monkeypatch):
    monkeypatch.setitem(app.config, "BOOTSTRAP_ADMIN_IDENTITY", None)
    assert principals.resolve("admin420@merchant.local").role == "user"
    assert principals.resolve("root@test.local").role == "user"


def test_inactive_admin_cannot_manage_principals(app, make_principal):
    admin = make_principal("a@example.com", role="admin", is_active=False)
    target = make_principal("u@example.com")
    with pytest.raises(PermissionDenied):
        principals.set_role(admin, target.id, "merchant")
    with pytest.raises(PermissionDenied):
        principals.set_merchant_tier(admin, target.id, "verified_merchant")
    with pytest.raises(PermissionDenied):
        principals.delete_principal(admin, target.id)
    with pytest.raises(PermissionDenied):
        principals.search_transfer_candidates(admin)
    assert db.session.get(UserProfile, target.id).role == "user"
