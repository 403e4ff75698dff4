from sqlalchemy import Column, String, Numeric, Text, DateTime, ForeignKey
from sqlalchemy.sql import func
from models import BIGINT
from models import db


class Order(db.Model):
    __tablename__ = "order"
    __table_args__ = (
        db.Index("ix_order_collection_status", "collection_id", "status"),
    )
    id = Column(BIGINT, primary_key=True)
    order_number = Column(String(32), unique=True, nullable=False)
    product_id = Column(String(36), ForeignKey("product.id"), nullable=False)
    collection_id = Column(String(36), ForeignKey("collection.id"), nullable=False)
    # free text: buyers never need an account
    wallet_address = Column(String(64), nullable=False, index=True)
    status = Column(String(30), default="draft")  # draft, pending_payment, confirmed, preparing, shipped, delivered, cancelled
    amount_sol = Column(Numeric(18, 9), nullable=True)
    transaction_signature = Column(String(128), nullable=True)
    shipping_address = Column(Text, nullable=True)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    product = db.relationship("Product", lazy=True)

    def to_dict(self):
        return {
            "id": self.id,
            "order_number": self.order_number,
            "product_id": self.product_id,
            "collection_id": self.collection_id,
            "wallet_address": self.wallet_address,
            "status": self.status,
            "amount_sol": float(self.amount_sol) if self.amount_sol is not None else None,
            "transaction_signature": self.transaction_signature,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
