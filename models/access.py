from datetime import datetime

from models import db


class AccessGrant(db.Model):
    __tablename__ = "access_grant"
    __table_args__ = (
        db.UniqueConstraint("user_id", "scope", "resource_id", name="uq_access_grant_user_scope"),
        db.Index("ix_access_grant_scope", "scope", "resource_id"),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(36), db.ForeignKey("user_profile.id"), nullable=False, index=True)
    scope = db.Column(db.String(20), nullable=False)  # collection, category, product
    resource_id = db.Column(db.String(36), nullable=False)
    access_level = db.Column(db.String(10), nullable=False)  # view, edit
    granted_by = db.Column(db.String(36), nullable=True)
    granted_at = db.Column(db.DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"<AccessGrant user={self.user_id} {self.scope}:{self.resource_id} {self.access_level}>"

    def to_dict(self):
        return {
            "user_id": self.user_id,
            "scope": self.scope,
            "resource_id": self.resource_id,
            "access_level": self.access_level,
            "granted_by": self.granted_by,
            "granted_at": self.granted_at.isoformat() if self.granted_at else None,
        }
