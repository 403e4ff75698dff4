import os

class BaseConfig:
    JSON_SORT_KEYS = False
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CORS_ALLOWED_ORIGINS = os.getenv("CORS_ALLOWED_ORIGINS", "*")
    RATELIMIT_STORAGE_URL = os.getenv("RATELIMIT_STORAGE_URL", "memory://")
    WALLET_ORDER_LIMIT_PER_IP = os.getenv("WALLET_ORDER_LIMIT_PER_IP", "60 per minute")
    JWT_SECRET = os.getenv("JWT_SECRET", "dev-insecure-jwt-key")
    WALLET_PROOF_SECRET = os.getenv("WALLET_PROOF_SECRET", "dev-insecure-wallet-proof-key")
    ACCESS_TOKEN_LIFETIME_MIN = int(os.getenv("ACCESS_TOKEN_LIFETIME_MIN", 60))
    WALLET_PROOF_LIFETIME_MIN = int(os.getenv("WALLET_PROOF_LIFETIME_MIN", 30))
    # unset means no identity is ever force-elevated
    BOOTSTRAP_ADMIN_IDENTITY = os.getenv("BOOTSTRAP_ADMIN_IDENTITY") or None
    OTEL_ENABLED = os.getenv("OTEL_ENABLED", "0") == "1"
    OTEL_SERVICE_NAME = os.getenv("OTEL_SERVICE_NAME", "storefront-access")
    OTEL_EXPORTER_OTLP_ENDPOINT = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4318/v1/traces")

class DevelopmentConfig(BaseConfig):
    DEBUG = True
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-insecure-key")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///dev.db")
    BOOTSTRAP_ADMIN_IDENTITY = os.getenv("BOOTSTRAP_ADMIN_IDENTITY", "admin420@merchant.local")

class TestingConfig(BaseConfig):
    TESTING = True
    SECRET_KEY = "test-key"
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    JWT_SECRET = "test-jwt-secret"
    WALLET_PROOF_SECRET = "test-wallet-proof-secret"
    BOOTSTRAP_ADMIN_IDENTITY = "root@test.local"
    RATELIMIT_ENABLED = False

class ProductionConfig(BaseConfig):
    DEBUG = False
    TESTING = False
    SECRET_KEY = os.getenv("SECRET_KEY")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL")

    @staticmethod
    def validate():
        missing = []
        for key in ("SECRET_KEY", "DATABASE_URL", "JWT_SECRET", "WALLET_PROOF_SECRET"):
            if not os.getenv(key):
                missing.append(key)
        if missing:
            raise RuntimeError(
                f"Missing required env vars in production: {', '.join(missing)}"
            )

def get_config_class():
    env = os.getenv("APP_ENV", "development").lower()
    if env == "production":
        ProductionConfig.validate()
        return ProductionConfig
    if env == "testing":
        return TestingConfig
    return DevelopmentConfig
