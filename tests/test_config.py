"""
Tests for settings parsing
"""

import pytest
from pydantic import ValidationError

from venue_booking.config import Settings, settings


@pytest.mark.unit
class TestSettings:

    def test_test_run_is_flagged_as_testing(self):
        assert settings.is_testing
        assert not Settings(APP_ENV="production").is_testing

    def test_plain_postgres_url_uses_asyncpg(self):
        configured = Settings(DATABASE_URL="postgresql://venues@db/venues")
        assert configured.DATABASE_URL == "postgresql+asyncpg://venues@db/venues"

    def test_content_types_from_comma_separated_string(self):
        configured = Settings(ASSET_ALLOWED_CONTENT_TYPES="Image/PNG, image/gif,")
        assert configured.ASSET_ALLOWED_CONTENT_TYPES == ["image/png", "image/gif"]

    def test_unknown_asset_backend_is_rejected(self):
        with pytest.raises(ValidationError):
            Settings(ASSET_STORE_BACKEND="s3")
