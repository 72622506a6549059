"""Tests for Settings, PipelineConfig, policy enums, and service wiring."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from src import services
from src.config import Settings
from src.history.stores import InMemoryLedgerStore
from src.pipeline_config import LedgerBackend, PipelineConfig, PipelineState, TaxonomyPolicy

# ---------------------------------------------------------------------------
# Enum tests
# ---------------------------------------------------------------------------


class TestTaxonomyPolicy:
    def test_values(self) -> None:
        assert TaxonomyPolicy.DROP_TRIPLE.value == "drop_triple"
        assert TaxonomyPolicy.REJECT_RECORD.value == "reject_record"

    def test_from_string(self) -> None:
        assert TaxonomyPolicy("drop_triple") is TaxonomyPolicy.DROP_TRIPLE
        assert TaxonomyPolicy("reject_record") is TaxonomyPolicy.REJECT_RECORD

    def test_invalid_raises(self) -> None:
        with pytest.raises(ValueError):
            TaxonomyPolicy("ignore")

    def test_is_str_subclass(self) -> None:
        """Enum values behave as plain strings for JSON serialization."""
        assert isinstance(TaxonomyPolicy.DROP_TRIPLE, str)


class TestLedgerBackend:
    def test_values(self) -> None:
        assert LedgerBackend("supabase") is LedgerBackend.SUPABASE
        assert LedgerBackend("memory") is LedgerBackend.MEMORY

    def test_invalid_raises(self) -> None:
        with pytest.raises(ValueError):
            LedgerBackend("postgres")


class TestPipelineState:
    def test_terminal_values(self) -> None:
        assert PipelineState.DONE.value == "done"
        assert PipelineState.DEGRADED.value == "degraded"
        assert PipelineState.FAILED.value == "failed"

    def test_is_str_subclass(self) -> None:
        assert isinstance(PipelineState.DEGRADED, str)


# ---------------------------------------------------------------------------
# PipelineConfig / Settings tests
# ---------------------------------------------------------------------------


class TestPipelineConfig:
    def test_defaults(self) -> None:
        cfg = PipelineConfig()
        assert cfg.taxonomy_policy is TaxonomyPolicy.DROP_TRIPLE
        assert cfg.ledger_max_retries == 5

    def test_custom_values(self) -> None:
        cfg = PipelineConfig(taxonomy_policy=TaxonomyPolicy.REJECT_RECORD, ledger_max_retries=1)
        assert cfg.taxonomy_policy is TaxonomyPolicy.REJECT_RECORD
        assert cfg.ledger_max_retries == 1

    def test_immutable(self) -> None:
        cfg = PipelineConfig()
        with pytest.raises(AttributeError):
            cfg.taxonomy_policy = TaxonomyPolicy.REJECT_RECORD  # type: ignore[misc]


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("WHISPER_MODEL", "HISTORY_PATH", "MAX_UPLOAD_BYTES", "TAXONOMY_POLICY"):
            monkeypatch.delenv(name, raising=False)
        cfg = Settings(_env_file=None)  # type: ignore[call-arg]
        assert cfg.whisper_model == "openai/whisper-large-v3"
        assert cfg.history_path == "history/results.json"
        assert cfg.max_upload_bytes == 50 * 1024 * 1024
        assert cfg.taxonomy_policy == "drop_triple"

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TAXONOMY_POLICY", "reject_record")
        monkeypatch.setenv("LEDGER_MAX_RETRIES", "2")
        cfg = Settings(_env_file=None)  # type: ignore[call-arg]
        assert cfg.taxonomy_policy == "reject_record"
        assert cfg.ledger_max_retries == 2


# ---------------------------------------------------------------------------
# Service wiring
# ---------------------------------------------------------------------------


class TestServices:
    def test_transcription_client_never_retries(self) -> None:
        services.get_transcription_client.cache_clear()
        try:
            with patch("src.services.OpenAI") as mock_openai:
                services.get_transcription_client()
            assert mock_openai.call_args.kwargs["max_retries"] == 0
            assert mock_openai.call_args.kwargs["base_url"].startswith("https://")
        finally:
            services.get_transcription_client.cache_clear()

    def test_memory_backend_builds_in_memory_store(self) -> None:
        services.get_ledger_store.cache_clear()
        try:
            with patch("src.services.settings") as mock_settings:
                mock_settings.ledger_backend = "memory"
                store = services.get_ledger_store()
            assert isinstance(store, InMemoryLedgerStore)
        finally:
            services.get_ledger_store.cache_clear()

    def test_validator_uses_configured_policy(self) -> None:
        services.get_pipeline_config.cache_clear()
        services.get_orchestrator.cache_clear()
        try:
            with (
                patch("src.services.settings") as mock_settings,
                patch("src.services.get_media_store", return_value=MagicMock()),
                patch("src.services.get_transcription_client", return_value=MagicMock()),
                patch("src.services.get_classification_client", return_value=MagicMock()),
                patch("src.services.get_history_ledger", return_value=MagicMock()),
            ):
                mock_settings.taxonomy_policy = "reject_record"
                mock_settings.ledger_max_retries = 3
                orchestrator = services.get_orchestrator()
            assert orchestrator._validator.policy is TaxonomyPolicy.REJECT_RECORD
        finally:
            services.get_pipeline_config.cache_clear()
            services.get_orchestrator.cache_clear()
