"""
Review aggregation - drives the per-unit review loop.

Standard mode splits the document into overlapping windows and reviews each
window in turn; outline mode answers each checklist row against the whole
document. Units are processed strictly one after another. A failing unit is
reported in the progress log and the loop moves on; only configuration and
chunking problems abort a run.
"""
import time
import logging
from typing import Callable, Iterable, List, Optional

from legal_review.config import settings
from legal_review.exceptions import GatewayError, RecoveryError
from legal_review.models import (
    ChecklistRow,
    OutlineAnswer,
    OutlineOutcome,
    ProviderConfig,
    ReviewFinding,
    ReviewOutcome,
    RiskType,
    Stance,
)
from legal_review.prompts.review_prompts import (
    OUTLINE_SYSTEM_PROMPT,
    REVIEW_SYSTEM_PROMPT,
    build_company_prompt,
    build_outline_prompt,
    build_review_prompt,
    build_similar_cases_prompt,
)
from legal_review.services.chunker import split_text, validate_sizes
from legal_review.services.provider_gateway import ProviderGateway, resolve_provider
from legal_review.services.response_recovery import recover_findings

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]
RowProgressCallback = Callable[[int, int, str], None]

ERROR_PREFIX = "Error:"


class ReviewAggregator:
    """Runs document reviews against one provider gateway."""

    def __init__(
        self,
        gateway: ProviderGateway,
        chunk_size: Optional[int] = None,
        chunk_overlap: Optional[int] = None,
        row_delay_seconds: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.gateway = gateway
        self.chunk_size = chunk_size if chunk_size is not None else settings.chunk_size
        self.chunk_overlap = chunk_overlap if chunk_overlap is not None else settings.chunk_overlap
        self.row_delay_seconds = (
            row_delay_seconds if row_delay_seconds is not None else settings.outline_row_delay_seconds
        )
        self._sleep = sleep

    def review_document(
        self,
        config: ProviderConfig,
        text: str,
        risks: Iterable[RiskType],
        stance: Stance = Stance.PARTY_A,
        on_progress: Optional[ProgressCallback] = None,
    ) -> ReviewOutcome:
        """
        Review a document window by window.

        Args:
            config: Provider configuration, validated before any call
            text: Extracted plain text of the document
            risks: Risk categories to focus on
            stance: Party perspective
            on_progress: Called with each progress line as it happens

        Returns:
            ReviewOutcome with all findings in window order and the progress log

        Raises:
            ConfigurationError: provider or API key invalid
            ChunkingError: chunk sizes invalid
        """
        resolve_provider(config)
        validate_sizes(self.chunk_size, self.chunk_overlap)
        risks = list(risks)

        logs: List[str] = []

        def emit(line: str) -> None:
            logs.append(line)
            if on_progress is not None:
                on_progress(line)

        windows = split_text(text, self.chunk_size, self.chunk_overlap)
        total = len(windows)
        emit(f"Document split into {total} part(s) for analysis...")

        findings: List[ReviewFinding] = []
        failed = 0
        for index, window in enumerate(windows, start=1):
            emit(f"Analyzing part {index}/{total}...")
            prompt = build_review_prompt(window.text, risks, stance)
            try:
                reply = self.gateway.complete(config, prompt, system_prompt=REVIEW_SYSTEM_PROMPT)
            except GatewayError as e:
                failed += 1
                logger.warning(f"Part {index}/{total} gateway failure ({e.kind}): {e}")
                emit(f"{ERROR_PREFIX} part {index}/{total}: {e}")
                continue

            try:
                unit_findings = recover_findings(reply)
            except RecoveryError as e:
                failed += 1
                logger.warning(f"Part {index}/{total} reply could not be parsed: {e}, "
                               f"reply preview: {reply[:300]!r}")
                emit(f"{ERROR_PREFIX} part {index}/{total} could not be parsed (malformed JSON), skipped.")
                continue

            findings.extend(unit_findings)
            emit(f"Part {index}/{total} done, {len(unit_findings)} finding(s).")

        emit(f"Analysis complete, {len(findings)} finding(s) in total.")
        logger.info(f"Review finished, chunks: {total}, failed: {failed}, findings: {len(findings)}")
        return ReviewOutcome(reviews=findings, logs=logs, chunk_count=total, failed_units=failed)

    def review_outline(
        self,
        config: ProviderConfig,
        text: str,
        rows: List[ChecklistRow],
        stance: Stance = Stance.PARTY_A,
        on_progress: Optional[RowProgressCallback] = None,
    ) -> OutlineOutcome:
        """
        Answer every checklist row against the full document text.

        Always returns exactly one answer per row; a failed row carries the
        error message as its result.
        """
        resolve_provider(config)

        logs: List[str] = []
        answers: List[OutlineAnswer] = []
        failed = 0
        total = len(rows)
        for index, row in enumerate(rows, start=1):
            if on_progress is not None:
                on_progress(index, total, row.item_name)
            logs.append(f"Reviewing item {index}/{total}: {row.item_name}")
            prompt = build_outline_prompt(text, row, stance)
            try:
                result = self.gateway.complete(config, prompt, system_prompt=OUTLINE_SYSTEM_PROMPT).strip()
            except GatewayError as e:
                failed += 1
                logger.warning(f"Checklist item {index}/{total} failed ({e.kind}): {e}")
                result = f"Review failed: {e}"
                logs.append(f"{ERROR_PREFIX} item {index}/{total}: {e}")

            answers.append(OutlineAnswer(
                row=row.row,
                item_name=row.item_name,
                description=row.description,
                result=result,
            ))

            if index < total and self.row_delay_seconds > 0:
                self._sleep(self.row_delay_seconds)

        logs.append(f"Checklist review complete, {total - failed}/{total} item(s) answered.")
        logger.info(f"Outline review finished, rows: {total}, failed: {failed}")
        return OutlineOutcome(answers=answers, logs=logs, failed_units=failed)

    def lookup_company(self, config: ProviderConfig, company_name: str) -> str:
        """Ask the provider about a counterparty; gateway errors propagate."""
        logger.info(f"Company lookup: {company_name}")
        return self.gateway.complete(config, build_company_prompt(company_name)).strip()

    def lookup_similar_cases(self, config: ProviderConfig, query: str) -> str:
        logger.info(f"Similar case lookup: {query}")
        return self.gateway.complete(config, build_similar_cases_prompt(query)).strip()
