from flask import Blueprint, request, g
from app.version import API_PREFIX
from app.utils import auth_required, role_required, ok, transactional, validate_schema
from app.schemas.principals import SetRoleRequest, SetTierRequest
from app.services import principals
from models.user import UserProfile

admin_bp = Blueprint("admin", __name__, url_prefix=f"{API_PREFIX}/admin")


@admin_bp.before_request
@auth_required
@role_required("admin")
def _enforce_admin_role():
    """Ensure the requester is an authenticated admin."""
    return None


@admin_bp.route("/principals", methods=["GET"])
def list_principals():
    users = UserProfile.query.order_by(UserProfile.created_at.desc()).limit(50).all()
    return ok({"principals": [u.to_dict() for u in users]})


@admin_bp.route("/principals/transfer-candidates", methods=["GET"])
def transfer_candidates():
    found = principals.search_transfer_candidates(
        g.principal,
        request.args.get("q", ""),
        exclude_id=request.args.get("exclude"),
    )
    return ok({"principals": [u.to_dict() for u in found]})


@admin_bp.route("/principals/<principal_id>/role", methods=["POST"])
@validate_schema(SetRoleRequest)
def set_role(principal_id):
    with transactional("Failed to set role"):
        user = principals.set_role(g.principal, principal_id, request.validated_data.role)
    return ok(user.to_dict(), message="Role updated")


@admin_bp.route("/principals/<principal_id>/tier", methods=["POST"])
@validate_schema(SetTierRequest)
def set_tier(principal_id):
    with transactional("Failed to set merchant tier"):
        user = principals.set_merchant_tier(g.principal, principal_id, request.validated_data.merchant_tier)
    return ok(user.to_dict(), message="Merchant tier updated")


@admin_bp.route("/principals/<principal_id>", methods=["DELETE"])
def delete_principal(principal_id):
    with transactional("Failed to delete principal"):
        principals.delete_principal(g.principal, principal_id)
    return ok(message="Principal deleted")
