# =============================================================================
# tests/unit/test_errors_config.py
# Unit Tests for the error hierarchy, UI error handling and configuration
# =============================================================================

import logging

import pytest

from marina_core.config import MarinaConfig, load_config
from marina_core.errors import (
    ConfigurationError,
    ErrorContext,
    ErrorKind,
    LockedError,
    ProviderError,
    handle_error,
)
from marina_core.logging import LogContext, resolve_level, set_debug


class TestExceptions:
    """Codes, kinds and serialisation"""

    @pytest.mark.parametrize("kind,code", [
        (ErrorKind.NOT_FOUND, "PROV_001"),
        (ErrorKind.UNAVAILABLE, "PROV_002"),
        (ErrorKind.INVALID, "PROV_003"),
    ])
    def test_provider_error_codes(self, kind, code):
        error = ProviderError("failed", kind=kind)
        assert error.code == code
        assert error.kind is kind

    def test_provider_error_rejects_other_kinds(self):
        with pytest.raises(ValueError):
            ProviderError("failed", kind=ErrorKind.TIMEOUT)

    def test_to_dict(self):
        error = LockedError("locked", forced_mode="mock", attempted_mode="database")
        data = error.to_dict()
        assert data["error_type"] == "LockedError"
        assert data["code"] == "MODE_001"
        assert data["kind"] == "invalid"
        assert data["details"] == {"forced_mode": "mock", "attempted_mode": "database"}

    def test_str_includes_code(self):
        assert str(ProviderError("down", endpoint="/api/boats")).startswith("[PROV_002] down")


class TestHandleError:
    """Operator-facing error reporting"""

    def test_locked_error_is_a_warning(self, mock_streamlit):
        handle_error(LockedError("Data source is locked"))
        mock_streamlit.warning.assert_called_once()
        mock_streamlit.error.assert_not_called()

    def test_provider_error_is_an_error(self, mock_streamlit):
        handle_error(ProviderError("Backend down"), user_message="Contracts unavailable")
        message = mock_streamlit.error.call_args[0][0]
        assert "Contracts unavailable" in message

    def test_silent_mode(self, mock_streamlit):
        handle_error(ProviderError("Backend down"), show_user_message=False)
        mock_streamlit.error.assert_not_called()

    def test_error_context_suppresses_recoverable(self, mock_streamlit):
        with ErrorContext("Switching data source") as ctx:
            raise LockedError("locked")
        assert ctx.failed
        mock_streamlit.warning.assert_called_once()

    def test_error_context_reraises_when_not_recoverable(self, mock_streamlit):
        with pytest.raises(RuntimeError):
            with ErrorContext("Resetting", recoverable=False):
                raise RuntimeError("boom")

    def test_error_context_success_message(self, mock_streamlit):
        with ErrorContext("Reset", show_success=True, success_message="Done") as ctx:
            pass
        assert not ctx.failed
        mock_streamlit.success.assert_called_once_with("Done")


class TestLogContext:
    def test_logs_start_and_completion(self, caplog):
        logger = logging.getLogger("marina_core.test")
        with caplog.at_level(logging.INFO, logger="marina_core.test"):
            with LogContext(logger, "Loading contracts"):
                pass
        messages = [r.getMessage() for r in caplog.records]
        assert messages[0] == "Loading contracts... started"
        assert messages[1].startswith("Loading contracts... completed")

    def test_expected_failure_is_one_warning(self, caplog):
        logger = logging.getLogger("marina_core.test")
        with caplog.at_level(logging.DEBUG, logger="marina_core.test"):
            with pytest.raises(ProviderError):
                with LogContext(logger, "Probing database backend", level=logging.DEBUG, expected=(ProviderError,)):
                    raise ProviderError("Backend down")

        started, failed = caplog.records
        assert started.levelno == logging.DEBUG
        assert failed.levelno == logging.WARNING
        assert failed.exc_info is None
        assert "Backend down" in failed.getMessage()

    def test_unexpected_failure_keeps_traceback(self, caplog):
        logger = logging.getLogger("marina_core.test")
        with caplog.at_level(logging.INFO, logger="marina_core.test"):
            with pytest.raises(RuntimeError):
                with LogContext(logger, "Loading boats", expected=(ProviderError,)):
                    raise RuntimeError("boom")

        failed = caplog.records[-1]
        assert failed.levelno == logging.ERROR
        assert failed.exc_info is not None


class TestLoggingSetup:
    """Level resolution and the debug switch"""

    @pytest.mark.parametrize("value,expected", [
        (None, logging.INFO),
        ("debug", logging.DEBUG),
        (" Warning ", logging.WARNING),
        (logging.ERROR, logging.ERROR),
    ])
    def test_resolve_level(self, value, expected, monkeypatch):
        monkeypatch.delenv("MARINA_LOG_LEVEL", raising=False)
        assert resolve_level(value) == expected

    def test_level_from_environment(self, monkeypatch):
        monkeypatch.setenv("MARINA_LOG_LEVEL", "debug")
        assert resolve_level(None) == logging.DEBUG

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            resolve_level("chatty")

    def test_set_debug(self):
        root = logging.getLogger("marina_core")
        set_debug(True)
        assert root.level == logging.DEBUG
        set_debug(False)
        assert root.level == logging.NOTSET


class TestConfig:
    """[marina] table in secrets.toml"""

    def test_defaults_without_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("MARINA_CONFIG", raising=False)
        monkeypatch.delenv("MARINA_API_URL", raising=False)
        monkeypatch.setattr("marina_core.config.DEFAULT_SECRETS_PATH", tmp_path / "missing.toml")

        config = load_config()
        assert config == MarinaConfig()
        assert config.probe_timeout == 8.0
        assert config.default_poll_interval == 5

    def test_reads_marina_table(self, tmp_path, monkeypatch):
        monkeypatch.delenv("MARINA_API_URL", raising=False)
        path = tmp_path / "secrets.toml"
        path.write_text(
            '[marina]\n'
            'api_base_url = "https://office.example.com"\n'
            'default_poll_interval = 30\n'
            'demo_latency = 0.2\n'
            '\n[supabase]\nurl = "ignored"\n'
        )

        config = load_config(path)
        assert config.api_base_url == "https://office.example.com"
        assert config.default_poll_interval == 30
        assert config.demo_latency == 0.2

    def test_env_overrides_url(self, tmp_path, monkeypatch):
        path = tmp_path / "secrets.toml"
        path.write_text('[marina]\napi_base_url = "http://a.example"\n')
        monkeypatch.setenv("MARINA_API_URL", "http://b.example")

        assert load_config(path).api_base_url == "http://b.example"

    def test_config_env_names_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("MARINA_API_URL", raising=False)
        path = tmp_path / "marina.toml"
        path.write_text("[marina]\nprobe_timeout = 3\n")
        monkeypatch.setenv("MARINA_CONFIG", str(path))

        assert load_config().probe_timeout == 3.0

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config(tmp_path / "nope.toml")

    def test_invalid_interval(self, tmp_path, monkeypatch):
        monkeypatch.delenv("MARINA_API_URL", raising=False)
        path = tmp_path / "secrets.toml"
        path.write_text("[marina]\ndefault_poll_interval = 7\n")
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(path)
        assert exc_info.value.code == "CONFIG_001"

    def test_unparseable_value(self, tmp_path, monkeypatch):
        monkeypatch.delenv("MARINA_API_URL", raising=False)
        path = tmp_path / "secrets.toml"
        path.write_text('[marina]\nprobe_timeout = "soon"\n')
        with pytest.raises(ConfigurationError):
            load_config(path)

    def test_bad_toml(self, tmp_path):
        path = tmp_path / "secrets.toml"
        path.write_text("[marina\n")
        with pytest.raises(ConfigurationError):
            load_config(path)
