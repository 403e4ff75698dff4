from datetime import datetime

from models import db
from models.user import _uuid


class Collection(db.Model):
    __tablename__ = "collection"

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    name = db.Column(db.String(100), nullable=False)
    slug = db.Column(db.String(120), unique=True, nullable=False)
    owner_id = db.Column(db.String(36), db.ForeignKey("user_profile.id"), nullable=False, index=True)
    created_by = db.Column(db.String(36), nullable=True)
    visible = db.Column(db.Boolean, nullable=False, default=False)
    # bumped on every ownership change; transfers compare-and-set against it
    version = db.Column(db.Integer, nullable=False, default=1)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    owner = db.relationship("UserProfile", lazy=True)
    categories = db.relationship("Category", backref="collection", cascade="all, delete-orphan", lazy=True)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "owner_id": self.owner_id,
            "visible": self.visible,
        }


class Category(db.Model):
    __tablename__ = "category"

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    collection_id = db.Column(db.String(36), db.ForeignKey("collection.id"), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)


class Product(db.Model):
    __tablename__ = "product"

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    collection_id = db.Column(db.String(36), db.ForeignKey("collection.id"), nullable=False, index=True)
    category_id = db.Column(db.String(36), db.ForeignKey("category.id"), nullable=True, index=True)
    name = db.Column(db.String(255), nullable=False)
    sku = db.Column(db.String(64), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)


class OwnershipTransferLog(db.Model):
    __tablename__ = "ownership_transfer_log"

    id = db.Column(db.Integer, primary_key=True)
    collection_id = db.Column(db.String(36), nullable=False, index=True)
    old_owner_id = db.Column(db.String(36), nullable=False)
    new_owner_id = db.Column(db.String(36), nullable=False)
    actor_id = db.Column(db.String(36), nullable=False)
    timestamp = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            "collection_id": self.collection_id,
            "old_owner_id": self.old_owner_id,
            "new_owner_id": self.new_owner_id,
            "actor_id": self.actor_id,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }
