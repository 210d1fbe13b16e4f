"""Simple in-process metrics registry for service instrumentation."""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict


@dataclass
class MetricsRegistry:
    """Holds counters exposed by the batch pipeline and the webhook."""

    generation_attempts: int = 0
    generation_successes: int = 0
    generation_failures: int = 0
    generation_failure_reasons: Counter = field(default_factory=Counter)
    deliveries_sent: int = 0
    deliveries_failed: int = 0
    answers_correct: int = 0
    answers_incorrect: int = 0
    repeat_answers: int = 0
    rejected_actions: Counter = field(default_factory=Counter)

    def record_generation_attempt(self) -> None:
        self.generation_attempts += 1

    def record_generation_success(self) -> None:
        self.generation_successes += 1

    def record_generation_failure(self, reason: str) -> None:
        self.generation_failures += 1
        self.generation_failure_reasons[reason] += 1

    def record_delivery(self, delivered: bool) -> None:
        if delivered:
            self.deliveries_sent += 1
        else:
            self.deliveries_failed += 1

    def record_answer(self, is_correct: bool, first_attempt: bool = True) -> None:
        if is_correct:
            self.answers_correct += 1
        else:
            self.answers_incorrect += 1
        if not first_attempt:
            self.repeat_answers += 1

    def record_rejected_action(self, reason: str) -> None:
        self.rejected_actions[reason] += 1

    @property
    def generation_success_rate(self) -> float:
        if self.generation_attempts == 0:
            return 0.0
        return self.generation_successes / self.generation_attempts

    def snapshot(self) -> Dict[str, object]:
        return {
            "generation_attempts": self.generation_attempts,
            "generation_successes": self.generation_successes,
            "generation_failures": self.generation_failures,
            "generation_failure_reasons": dict(self.generation_failure_reasons),
            "generation_success_rate": self.generation_success_rate,
            "deliveries_sent": self.deliveries_sent,
            "deliveries_failed": self.deliveries_failed,
            "answers_correct": self.answers_correct,
            "answers_incorrect": self.answers_incorrect,
            "repeat_answers": self.repeat_answers,
            "rejected_actions": dict(self.rejected_actions),
        }


METRICS = MetricsRegistry()

__all__ = ["METRICS", "MetricsRegistry"]
