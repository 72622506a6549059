"""Structural and taxonomy validation of classification documents."""

from __future__ import annotations

import logging
from typing import Any

import pydantic

from src.classification.models import ClassificationRecord, ValidationOutcome
from src.classification.taxonomy import is_known
from src.errors import ValidationError
from src.pipeline_config import TaxonomyPolicy

logger = logging.getLogger(__name__)


def _format_schema_errors(exc: pydantic.ValidationError) -> list[str]:
    issues: list[str] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        issues.append(f"{location}: {error['msg']}")
    return issues


class ResultValidator:
    """Check a parsed LLM document against the schema and the closed taxonomy.

    Under :attr:`TaxonomyPolicy.DROP_TRIPLE` unknown triples are removed from
    their segment and reported; the segment itself is kept, possibly with an
    empty classification list. Under :attr:`TaxonomyPolicy.REJECT_RECORD` a
    single unknown triple rejects the whole record.
    """

    def __init__(self, policy: TaxonomyPolicy = TaxonomyPolicy.DROP_TRIPLE) -> None:
        self.policy = policy

    def validate(self, payload: Any) -> ValidationOutcome:
        """Return the validated record and any taxonomy issues.

        Raises:
            ValidationError: Schema violation, or an unknown triple under
                ``REJECT_RECORD``.
        """
        if not isinstance(payload, dict):
            raise ValidationError(
                f"Classification must be a JSON object, got {type(payload).__name__}"
            )

        try:
            record = ClassificationRecord.model_validate(payload)
        except pydantic.ValidationError as exc:
            issues = _format_schema_errors(exc)
            raise ValidationError(
                f"Classification does not match the schema ({len(issues)} issue(s))",
                issues=issues,
            ) from exc

        issues: list[str] = []
        for index, segment in enumerate(record.Segments):
            kept = []
            for match in segment.SegmentClassification:
                if is_known(match.Category, match.EventType, match.SubType):
                    kept.append(match)
                    continue
                issues.append(
                    f"Segments.{index} (SegmentID={segment.SegmentID}): unknown taxonomy triple "
                    f"{match.Category!r} / {match.EventType!r} / {match.SubType!r}"
                )
            segment.SegmentClassification = kept

        if issues and self.policy is TaxonomyPolicy.REJECT_RECORD:
            raise ValidationError(
                f"Classification uses {len(issues)} triple(s) outside the taxonomy",
                issues=issues,
            )

        for issue in issues:
            logger.warning("Dropped non-conforming classification: %s", issue)
        return ValidationOutcome(record=record, issues=issues)
