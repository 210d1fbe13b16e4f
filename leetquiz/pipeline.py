"""Batch driver: fetch candidates, synthesize, persist, archive and deliver."""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import List, Optional

from .delivery import DeliveryChannel
from .errors import GenerationError, StoreError
from .repositories import QuestionArchive, QuestionRepository
from .sources import CandidateSource, select_candidates
from .synthesis import QuestionSynthesizer


logger = logging.getLogger(__name__)


@dataclass
class BatchReport:
    """Per-run counters returned to the caller."""

    fetched: int = 0
    selected: int = 0
    generated: int = 0
    stored: int = 0
    delivered: int = 0
    question_ids: List[str] = field(default_factory=list)
    failures: List[str] = field(default_factory=list)


class QuizPipeline:
    """Runs one batch; candidates are processed strictly one after another."""

    def __init__(
        self,
        source: CandidateSource,
        synthesizer: QuestionSynthesizer,
        store: QuestionRepository,
        archive: QuestionArchive,
        channel: DeliveryChannel,
        sample_size: int = 1,
        difficulty: str = "Medium",
        rng: Optional[random.Random] = None,
    ) -> None:
        self._source = source
        self._synthesizer = synthesizer
        self._store = store
        self._archive = archive
        self._channel = channel
        self._sample_size = sample_size
        self._difficulty = difficulty
        self._rng = rng

    async def run_batch(self, count: Optional[int] = None) -> BatchReport:
        """Run the pipeline; ``SourceFetchError`` aborts, per-item failures do not."""

        report = BatchReport()
        candidates = await self._source.fetch_candidates()
        report.fetched = len(candidates)
        selected = select_candidates(
            candidates,
            count=count or self._sample_size,
            difficulty=self._difficulty,
            rng=self._rng,
        )
        report.selected = len(selected)
        logger.info("Selected %d of %d candidates", report.selected, report.fetched)

        for candidate in selected:
            try:
                question = await self._synthesizer.synthesize(candidate)
            except GenerationError as exc:
                logger.warning("Skipping %r: %s", candidate.name, exc)
                report.failures.append(f"{candidate.name}: {exc.reason}")
                continue
            report.generated += 1

            try:
                self._store.create_question(question)
            except StoreError as exc:
                logger.error("Could not store question %s: %s", question.id, exc)
                report.failures.append(f"{candidate.name}: store_error")
                continue
            report.stored += 1
            report.question_ids.append(question.id)

            try:
                self._archive.append(question)
            except OSError as exc:
                logger.warning("Could not archive question %s: %s", question.id, exc)

            if await self._channel.deliver(question):
                report.delivered += 1
            else:
                report.failures.append(f"{candidate.name}: delivery_error")

        logger.info(
            "Batch finished: %d generated, %d stored, %d delivered",
            report.generated,
            report.stored,
            report.delivered,
        )
        return report


__all__ = ["BatchReport", "QuizPipeline"]
