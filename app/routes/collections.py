from flask import Blueprint, request, g
from app.version import API_PREFIX
from app.utils import auth_required, ok, transactional, validate_schema
from app.schemas.access import TransferOwnershipRequest
from app.schemas.catalog import CreateCollectionRequest, VisibilityRequest
from app.services import catalog, grants, hierarchy

collections_bp = Blueprint("collections", __name__, url_prefix=f"{API_PREFIX}/collections")


@collections_bp.route("", methods=["POST"])
@auth_required
@validate_schema(CreateCollectionRequest)
def create_collection():
    body = request.validated_data
    with transactional("Failed to create collection"):
        collection = catalog.create_collection(g.principal, body.name, slug=body.slug, visible=body.visible)
    return ok(collection.to_dict(), message="Collection created", status=201)


@collections_bp.route("/<collection_id>/visibility", methods=["PATCH"])
@auth_required
@validate_schema(VisibilityRequest)
def set_visibility(collection_id):
    with transactional("Failed to update visibility"):
        collection = catalog.set_visibility(g.principal, collection_id, request.validated_data.visible)
    return ok(collection.to_dict())


@collections_bp.route("/<collection_id>", methods=["DELETE"])
@auth_required
def delete_collection(collection_id):
    with transactional("Failed to delete collection"):
        catalog.delete_collection(g.principal, collection_id)
    return ok(message="Collection deleted")


@collections_bp.route("/<collection_id>/transfer", methods=["POST"])
@auth_required
@validate_schema(TransferOwnershipRequest)
def transfer_ownership(collection_id):
    with transactional("Failed to transfer ownership"):
        log = hierarchy.transfer_ownership(g.principal, collection_id, request.validated_data.new_owner_id)
    return ok(log.to_dict(), message="Ownership transferred")


@collections_bp.route("/<collection_id>/access", methods=["GET"])
@auth_required
def access_details(collection_id):
    return ok(grants.access_details(g.principal, collection_id))
