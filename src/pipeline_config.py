"""Pipeline configuration: policy enums and PipelineConfig dataclass."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TaxonomyPolicy(str, Enum):
    """What the validator does with a triple outside the closed taxonomy."""

    DROP_TRIPLE = "drop_triple"
    REJECT_RECORD = "reject_record"


class LedgerBackend(str, Enum):
    """Where the history ledger document lives."""

    SUPABASE = "supabase"
    MEMORY = "memory"


class PipelineState(str, Enum):
    """States a single pipeline run moves through."""

    INGESTING = "ingesting"
    TRANSCRIBING = "transcribing"
    CLASSIFYING = "classifying"
    PERSISTING = "persisting"
    DONE = "done"
    DEGRADED = "degraded"
    FAILED = "failed"


@dataclass(frozen=True)
class PipelineConfig:
    """Immutable configuration for a pipeline run.

    Defaults mirror the service's production behaviour (drop unknown
    taxonomy triples, retry ledger conflicts a handful of times).
    """

    taxonomy_policy: TaxonomyPolicy = TaxonomyPolicy.DROP_TRIPLE
    ledger_max_retries: int = 5
