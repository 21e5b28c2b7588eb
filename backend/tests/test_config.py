import pytest

from school_api.config import DEFAULT_JWT_SECRET, Settings


def test_dev_allows_default_secret(monkeypatch):
    monkeypatch.setenv('ENV', 'dev')
    monkeypatch.delenv('JWT_SECRET', raising=False)
    assert Settings().JWT_SECRET == DEFAULT_JWT_SECRET


def test_production_requires_secret(monkeypatch):
    monkeypatch.setenv('ENV', 'production')
    monkeypatch.delenv('JWT_SECRET', raising=False)
    monkeypatch.delenv('ALLOW_INSECURE_JWT', raising=False)
    with pytest.raises(RuntimeError):
        Settings()


def test_production_rejects_blank_secret(monkeypatch):
    monkeypatch.setenv('ENV', 'production')
    monkeypatch.setenv('JWT_SECRET', '   ')
    with pytest.raises(RuntimeError):
        Settings()


def test_production_with_secret(monkeypatch):
    monkeypatch.setenv('ENV', 'production')
    monkeypatch.setenv('JWT_SECRET', 's3cret-value')
    s = Settings()
    assert s.ENV == 'production'
    assert s.JWT_SECRET == 's3cret-value'


def test_insecure_override(monkeypatch):
    monkeypatch.setenv('ENV', 'staging')
    monkeypatch.delenv('JWT_SECRET', raising=False)
    monkeypatch.setenv('ALLOW_INSECURE_JWT', 'true')
    assert Settings().ALLOW_INSECURE_JWT is True
