from flask import Blueprint, request, g
from app.version import API_PREFIX
from app.utils import auth_required, ok, transactional, validate_schema
from app.schemas.access import GrantRequest, RevokeRequest, CheckRequest
from app.services import grants, hierarchy, permissions

access_bp = Blueprint("access", __name__, url_prefix=API_PREFIX)


@access_bp.route("/me", methods=["GET"])
@auth_required
def me():
    return ok(g.principal.to_dict())


@access_bp.route("/access/grants", methods=["POST"])
@auth_required
@validate_schema(GrantRequest)
def grant_access():
    body = request.validated_data
    with transactional("Failed to grant access"):
        record = grants.grant(g.principal, body.principal_id, body.scope, body.resource_id, body.level)
    return ok(record.to_dict(), message="Access granted")


@access_bp.route("/access/grants", methods=["DELETE"])
@auth_required
@validate_schema(RevokeRequest)
def revoke_access():
    body = request.validated_data
    with transactional("Failed to revoke access"):
        removed = grants.revoke(g.principal, body.principal_id, body.scope, body.resource_id)
    return ok({"removed": removed}, message="Access revoked")


@access_bp.route("/access/grants/mine", methods=["GET"])
@auth_required
def my_grants():
    return ok({"grants": [r.to_dict() for r in grants.list_for_principal(g.principal.id)]})


@access_bp.route("/access/check", methods=["POST"])
@auth_required
@validate_schema(CheckRequest)
def check_access():
    body = request.validated_data
    resource = hierarchy.load_resource(body.resource_type, body.resource_id)
    decision = permissions.check(g.principal, resource, body.level)
    return ok(decision.to_dict())
