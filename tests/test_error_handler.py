"""Tests for user-friendly error mapping."""

from cartwatch_core.error_handler import DEFAULT_FAILURE_MESSAGE, format_user_friendly_error
from cartwatch_core.exceptions import PageLoadError, StorageError


class TestFormatUserFriendlyError:

    def test_storage_error(self):
        info = format_user_friendly_error(StorageError("disk full"), context="storage")
        assert info["message"] == DEFAULT_FAILURE_MESSAGE
        assert info["kind"] == "error"
        assert info["technical"] == "disk full"

    def test_page_load_error(self):
        info = format_user_friendly_error(PageLoadError("net::ERR_NAME_NOT_RESOLVED"))
        assert info["message"] == "Could not read this page"
        assert info["can_retry"]

    def test_quota_pattern(self):
        info = format_user_friendly_error(RuntimeError("QuotaExceededError: storage quota"))
        assert info["can_retry"] is False
        assert "full" in info["message"]

    def test_timeout_pattern(self):
        info = format_user_friendly_error(TimeoutError("Timeout 30000ms exceeded"))
        assert info["message"] == "The page took too long to respond"

    def test_unknown_error_uses_default(self):
        info = format_user_friendly_error(ValueError("weird"), technical_details="trace")
        assert info["message"] == DEFAULT_FAILURE_MESSAGE
        assert info["technical"] == "trace"

    def test_mapping_not_mutated(self):
        first = format_user_friendly_error(StorageError("a"))
        first["message"] = "changed"
        assert format_user_friendly_error(StorageError("b"))["message"] == DEFAULT_FAILURE_MESSAGE
