"""Unit tests for settings."""

from influence_map.config import Settings


class TestSettings:
    """Tests for Settings defaults and overrides."""

    def test_test_settings(self, test_settings: Settings) -> None:
        """Test settings disable animation and use the test database."""
        assert test_settings.layout_animation_seconds == 0.0
        assert test_settings.neo4j_database == "neo4j_test"

    def test_semantic_zoom_defaults(self) -> None:
        """Test semantic zoom defaults."""
        s = Settings(_env_file=None)
        assert s.default_filter_level == 0.5
        assert s.filter_step == 0.08
        assert (s.min_visible, s.max_visible) == (1, 50)
        assert s.unbounded_threshold == 0.95

    def test_env_override(self, monkeypatch) -> None:
        """Test environment variables override defaults."""
        monkeypatch.setenv("CACHE_TTL_SECONDS", "30")
        monkeypatch.setenv("MAX_VISIBLE", "20")
        s = Settings(_env_file=None)
        assert s.cache_ttl_seconds == 30.0
        assert s.max_visible == 20
