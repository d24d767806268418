"""Unit tests for application settings."""

from src.config.settings import Settings


def make_settings(**overrides) -> Settings:
    # _env_file=None keeps a developer's .env out of the tests
    return Settings(_env_file=None, **overrides)


class TestSettings:
    def test_endpoint_built_from_account_id(self):
        settings = make_settings(r2_account_id="abc123")
        assert settings.r2_endpoint == "https://abc123.r2.cloudflarestorage.com"

    def test_explicit_endpoint_wins(self):
        settings = make_settings(r2_account_id="abc123", r2_endpoint_url="http://localhost:9000")
        assert settings.r2_endpoint == "http://localhost:9000"

    def test_api_keys_parsed(self):
        settings = make_settings(api_keys=" one, two ,,")
        assert settings.api_keys_list == ["one", "two"]

    def test_missing_credentials_reported(self):
        settings = make_settings(r2_mock_mode=False)
        assert settings.validate_required_fields() == [
            "R2_ACCOUNT_ID or R2_ENDPOINT_URL",
            "R2_ACCESS_KEY_ID",
            "R2_SECRET_ACCESS_KEY",
        ]

    def test_mock_mode_needs_no_credentials(self):
        assert make_settings(r2_mock_mode=True).validate_required_fields() == []

    def test_download_defaults(self):
        settings = make_settings()
        assert settings.download_temp_prefix == "r2download_"
        assert settings.download_temp_dir is None
