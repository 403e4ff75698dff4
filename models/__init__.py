from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import BigInteger, Integer

# Use BigInteger in production but fall back to Integer for SQLite
BIGINT = BigInteger().with_variant(Integer, "sqlite")

db = SQLAlchemy()

# Re-export common models for convenience
from .user import UserProfile  # noqa: F401,E402
from .catalog import Collection, Category, Product, OwnershipTransferLog  # noqa: F401,E402
from .order import Order  # noqa: F401,E402
from .access import AccessGrant  # noqa: F401,E402
