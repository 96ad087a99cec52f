"""
Tests for environment-driven configuration
"""

from promptforge_mcp.config import ServerConfig

SERVICE_KEYS = (
    "PATTERNS_API_ENDPOINT",
    "PATTERNS_API_KEY",
    "ANALYTICS_API_ENDPOINT",
    "ANALYTICS_API_KEY",
)


class TestServerConfig:
    """Test ServerConfig defaults and overrides"""

    def test_defaults(self, monkeypatch):
        for key in (*SERVICE_KEYS, "PROMPTFORGE_CACHE_TTL", "MCP_HTTP_PORT", "MCP_CORS_ORIGINS"):
            monkeypatch.delenv(key, raising=False)

        settings = ServerConfig()

        assert settings.cache_ttl_seconds == 300
        assert settings.detection_mode == "weighted"
        assert settings.confidence_base == 0.6
        assert settings.max_confidence == 0.99
        assert settings.http_port == 8000
        assert settings.cors_origins == ["http://localhost:3000", "http://127.0.0.1:3000"]
        assert settings.missing_settings() == list(SERVICE_KEYS)

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("PROMPTFORGE_CACHE_TTL", "60")
        monkeypatch.setenv("PROMPTFORGE_DETECTION_MODE", "ratio")
        monkeypatch.setenv("MAX_PROMPT_LENGTH", "500")
        monkeypatch.setenv("MCP_CORS_ORIGINS", "https://app.example.com, https://admin.example.com")

        settings = ServerConfig()

        assert settings.cache_ttl_seconds == 60
        assert settings.detection_mode == "ratio"
        assert settings.max_prompt_length == 500
        assert settings.cors_origins == ["https://app.example.com", "https://admin.example.com"]

    def test_to_dict_hides_secrets(self, monkeypatch):
        monkeypatch.setenv("PATTERNS_API_ENDPOINT", "https://patterns.example.com")
        monkeypatch.setenv("PATTERNS_API_KEY", "super-secret")

        data = ServerConfig().to_dict()

        assert data["patterns_store"] == "remote"
        assert "super-secret" not in str(data)
