import pytest
from fastapi.testclient import TestClient

from app.config import Settings, load_settings, strip_protocol


def test_origins_include_host_with_and_without_port():
    settings = Settings(auth_secret="x", server_ip="10.0.0.5", frontend_port=8080)

    origins = settings.allowed_origins()

    assert "http://10.0.0.5" in origins
    assert "http://10.0.0.5:8080" in origins
    assert "http://localhost" in origins
    assert len(origins) == len(set(origins))


def test_origins_are_deduplicated_for_localhost():
    origins = Settings(auth_secret="x").allowed_origins()

    assert origins == ["http://localhost", "http://localhost:80"]


def test_frontend_url_is_appended():
    settings = Settings(auth_secret="x", frontend_url="https://app.example.com/")

    assert settings.allowed_origins()[-1] == "https://app.example.com"


def test_strip_protocol():
    assert strip_protocol("http://1.2.3.4") == "1.2.3.4"
    assert strip_protocol("https://host") == "host"
    assert strip_protocol("host") == "host"


@pytest.mark.parametrize("env,bypass", [("production", False), ("development", True), ("test", True)])
def test_same_user_bypass_follows_environment(env, bypass):
    assert Settings(environment=env, auth_secret="x").same_user_bypass is bypass


def test_default_settings_enforce_same_user():
    assert Settings().same_user_bypass is False


def test_load_settings_requires_secret_in_production(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.delenv("AUTH_SECRET", raising=False)

    with pytest.raises(ValueError):
        load_settings()


def test_load_settings_reads_environment(monkeypatch):
    monkeypatch.setenv("APP_ENV", "development")
    monkeypatch.delenv("AUTH_SECRET", raising=False)
    monkeypatch.setenv("SERVER_IP", "https://192.168.1.20")
    monkeypatch.setenv("FRONTEND_PORT", "3000")
    monkeypatch.setenv("SESSION_MAX_AGE_SECONDS", "600")

    settings = load_settings()

    assert settings.environment == "development"
    assert settings.auth_secret
    assert settings.server_ip == "192.168.1.20"
    assert settings.frontend_port == 3000
    assert settings.session_max_age == 600
    assert "http://192.168.1.20:3000" in settings.allowed_origins()


def test_load_settings_rejects_unknown_environment(monkeypatch):
    monkeypatch.setenv("APP_ENV", "staging")

    with pytest.raises(ValueError):
        load_settings()


def test_cors_preflight_allows_configured_origin(client: TestClient):
    response = client.options(
        "/api/users",
        headers={
            "Origin": "http://localhost",
            "Access-Control-Request-Method": "GET",
            "Access-Control-Request-Headers": "Authorization",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost"
    assert response.headers["access-control-allow-credentials"] == "true"
    assert "PATCH" in response.headers["access-control-allow-methods"]


def test_cors_preflight_rejects_unknown_origin(client: TestClient):
    response = client.options(
        "/api/users",
        headers={"Origin": "http://evil.example.com", "Access-Control-Request-Method": "GET"},
    )

    assert response.status_code == 400
    assert "access-control-allow-origin" not in response.headers
