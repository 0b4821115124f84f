"""Tests for configuration, logging and token handling."""

import logging
from datetime import timedelta
from uuid import uuid4

import pytest

from gatepass.core.config import Settings
from gatepass.core.errors import ConflictError, InvalidStateError, PermissionDeniedError, WorkflowError
from gatepass.core.logger import configure_logging, setup_logger
from gatepass.core.security import create_access_token, decode_token, get_password_hash, verify_password


class TestSettings:

    def test_defaults(self):
        settings = Settings(_env_file=None)
        assert settings.app_name == "GatePass"
        assert settings.algorithm == "HS256"
        assert settings.report_base_path == "/reports"

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("GATEPASS_ACCESS_TOKEN_EXPIRE_MINUTES", "5")
        monkeypatch.setenv("GATEPASS_CORS_ORIGINS", "http://a.example, http://b.example")
        settings = Settings(_env_file=None)
        assert settings.access_token_expire_minutes == 5
        assert settings.cors_origins_list == ["http://a.example", "http://b.example"]


class TestLogger:

    def test_setup_logger_console_only(self):
        logger = setup_logger("gatepass-test-console", file_logging=False, level="DEBUG")
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1

    def test_setup_logger_with_file(self, tmp_path):
        logger = setup_logger("gatepass-test-file", log_dir=str(tmp_path), console_logging=False)
        logger.info("hello")
        assert (tmp_path / "gatepass-test-file.log").exists()

    def test_invalid_level(self):
        with pytest.raises(ValueError):
            setup_logger("gatepass-test-invalid", level="LOUD", file_logging=False)

    def test_configure_logging_from_settings(self):
        settings = Settings(_env_file=None, log_to_file=False, log_level="WARNING")
        logger = configure_logging(settings)
        assert logger.name == "gatepass"
        assert logger.level == logging.WARNING
        logger.setLevel(logging.INFO)


class TestErrors:

    def test_codes(self):
        assert PermissionDeniedError().code == "permission_denied"
        assert InvalidStateError("x", current_state="DRAFT").context == {"current_state": "DRAFT"}
        assert ConflictError("x").retryable
        assert not WorkflowError("x").retryable


class TestTokens:

    def test_round_trip(self):
        user_id = uuid4()
        assert decode_token(create_access_token(user_id)) == user_id

    def test_expired_token(self):
        token = create_access_token(uuid4(), expires_delta=timedelta(minutes=-1))
        assert decode_token(token) is None

    def test_garbage_token(self):
        assert decode_token("not.a.token") is None

    def test_password_hash(self):
        hashed = get_password_hash("s3cret")
        assert verify_password("s3cret", hashed)
        assert not verify_password("wrong", hashed)
