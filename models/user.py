# --- models/user.py ---
import uuid
from datetime import datetime

from models import db


def _uuid():
    return str(uuid.uuid4())


# --- Principal ---

class UserProfile(db.Model):
    __tablename__ = "user_profile"

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    identity = db.Column(db.String(255), unique=True, nullable=False)
    display_name = db.Column(db.String(100), nullable=True)
    role = db.Column(db.String(20), nullable=False, default="user")
    merchant_tier = db.Column(db.String(30), nullable=False, default="starter_merchant")
    successful_sales_count = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<User id={self.id} role={self.role}>"

    def to_dict(self):
        return {
            "id": self.id,
            "identity": self.identity,
            "display_name": self.display_name,
            "role": self.role,
            "merchant_tier": self.merchant_tier,
            "successful_sales_count": self.successful_sales_count,
            "is_active": self.is_active,
        }
