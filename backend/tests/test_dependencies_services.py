"""Tests for service dependency wiring."""

import logging

from badgeforge.config import Settings
from badgeforge.dependencies.services import get_token_codec


class TestGetTokenCodec:
    def test_codec_built_from_settings(self):
        codec = get_token_codec(Settings(_env_file=None, jwt_secret="secret", session_days=2))

        assert codec is not None
        assert codec.max_age == 2 * 24 * 3600

    def test_missing_secret_disables_sessions_quietly(self, caplog):
        """Every session read hits this path, so it must not warn per request."""
        settings = Settings(_env_file=None, jwt_secret="  ")

        with caplog.at_level(logging.DEBUG, logger="badgeforge.dependencies.services"):
            for _ in range(3):
                assert get_token_codec(settings) is None

        assert not [r for r in caplog.records if r.levelno >= logging.WARNING]
