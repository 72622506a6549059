"""Process-wide service construction.

Every external client is built once, from settings, on first use and then
injected into the components that need it. FastAPI routes receive these
through ``Depends`` so tests can swap them via ``app.dependency_overrides``.
"""

from __future__ import annotations

from functools import lru_cache

from openai import OpenAI

from src.classification.classifier import ClassificationClient
from src.classification.validator import ResultValidator
from src.config import settings
from src.history.analytics import AnalyticsReader
from src.history.ledger import HistoryLedger
from src.history.stores import InMemoryLedgerStore, LedgerStore, SupabaseLedgerStore
from src.ingestion.storage import MediaStore, get_supabase_client
from src.ingestion.transcription import TranscriptionClient
from src.pipeline.orchestrator import PipelineOrchestrator
from src.pipeline_config import LedgerBackend, PipelineConfig, TaxonomyPolicy


@lru_cache(maxsize=1)
def get_pipeline_config() -> PipelineConfig:
    return PipelineConfig(
        taxonomy_policy=TaxonomyPolicy(settings.taxonomy_policy),
        ledger_max_retries=settings.ledger_max_retries,
    )


@lru_cache(maxsize=1)
def get_media_store() -> MediaStore:
    return MediaStore(
        get_supabase_client(),
        bucket=settings.media_bucket,
        public_base_url=settings.supabase_url,
        timeout=settings.request_timeout_seconds,
    )


@lru_cache(maxsize=1)
def get_transcription_client() -> TranscriptionClient:
    client = OpenAI(
        api_key=settings.deepinfra_api_key,
        base_url=settings.whisper_base_url,
        timeout=settings.request_timeout_seconds,
        max_retries=0,
    )
    return TranscriptionClient(client, model=settings.whisper_model)


@lru_cache(maxsize=1)
def get_classification_client() -> ClassificationClient:
    import google.generativeai as genai

    genai.configure(api_key=settings.gemini_api_key)  # type: ignore[attr-defined]
    model = genai.GenerativeModel(  # type: ignore[attr-defined]
        settings.gemini_model,
        generation_config={"response_mime_type": "application/json"},
    )
    return ClassificationClient(model)


@lru_cache(maxsize=1)
def get_ledger_store() -> LedgerStore:
    if LedgerBackend(settings.ledger_backend) is LedgerBackend.MEMORY:
        return InMemoryLedgerStore()
    return SupabaseLedgerStore(
        get_supabase_client(),
        bucket=settings.analytics_bucket,
        path=settings.history_path,
    )


@lru_cache(maxsize=1)
def get_history_ledger() -> HistoryLedger:
    return HistoryLedger(
        get_ledger_store(),
        max_retries=get_pipeline_config().ledger_max_retries,
    )


def get_analytics_reader() -> AnalyticsReader:
    return AnalyticsReader(get_history_ledger())


@lru_cache(maxsize=1)
def get_orchestrator() -> PipelineOrchestrator:
    return PipelineOrchestrator(
        media_store=get_media_store(),
        transcriber=get_transcription_client(),
        classifier=get_classification_client(),
        validator=ResultValidator(get_pipeline_config().taxonomy_policy),
        ledger=get_history_ledger(),
    )
