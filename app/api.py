from app.routes import (
    access_bp,
    admin_bp,
    collections_bp,
    orders_bp,
)


def register_api_v1(app):
    """Register blueprint routes under the API version prefix."""
    app.register_blueprint(access_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(collections_bp)
    app.register_blueprint(orders_bp)
