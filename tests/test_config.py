"""Tests for configuration selection by APP_ENV."""
import os

import pytest

from app.config import get_config_class, DevelopmentConfig, TestingConfig, ProductionConfig


def test_testing_config_uses_memory_db(monkeypatch):
    monkeypatch.setenv('APP_ENV', 'testing')
    cfg = get_config_class()
    assert cfg is TestingConfig
    assert cfg.TESTING is True
    assert cfg.SQLALCHEMY_DATABASE_URI.startswith('sqlite://')
    assert cfg.RATELIMIT_ENABLED is False


def test_development_is_default(monkeypatch):
    monkeypatch.delenv('APP_ENV', raising=False)
    cfg = get_config_class()
    assert cfg is DevelopmentConfig
    assert cfg.DEBUG is True


def test_production_requires_secrets(monkeypatch):
    monkeypatch.setenv('APP_ENV', 'production')
    for key in ('SECRET_KEY', 'DATABASE_URL', 'JWT_SECRET', 'WALLET_PROOF_SECRET'):
        monkeypatch.delenv(key, raising=False)
    with pytest.raises(RuntimeError) as exc:
        get_config_class()
    assert 'WALLET_PROOF_SECRET' in str(exc.value)


def test_production_with_secrets(monkeypatch):
    monkeypatch.setenv('APP_ENV', 'production')
    for key in ('SECRET_KEY', 'DATABASE_URL', 'JWT_SECRET', 'WALLET_PROOF_SECRET'):
        monkeypatch.setenv(key, 'set')
    assert get_config_class() is ProductionConfig


def test_bootstrap_identity_configured():
    assert TestingConfig.BOOTSTRAP_ADMIN_IDENTITY == 'root@test.local'
    assert DevelopmentConfig.BOOTSTRAP_ADMIN_IDENTITY


def test_production_has_no_default_bootstrap_identity():
    if os.getenv('BOOTSTRAP_ADMIN_IDENTITY'):
        pytest.skip('BOOTSTRAP_ADMIN_IDENTITY set in the environment')
    assert ProductionConfig.BOOTSTRAP_ADMIN_IDENTITY is None
    assert DevelopmentConfig.BOOTSTRAP_ADMIN_IDENTITY
