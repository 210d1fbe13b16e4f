"""Concrete repository implementations backed by SQLite and local storage."""
from __future__ import annotations

import json
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, List, Optional

from .errors import DuplicateIdError, QuestionNotFoundError, StoreError
from .models import AnswerResult, Attempt, Question, QuestionOption, utcnow
from .repositories import AttemptRepository, QuestionArchive, QuestionRepository


def _to_db_time(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _from_db_time(value: str) -> datetime:
    return datetime.fromisoformat(value)


def _row_to_question(row: sqlite3.Row) -> Question:
    options = [QuestionOption(**option) for option in json.loads(row["options_json"])]
    return Question(
        id=row["id"],
        source_reference=row["source_reference"],
        prompt=row["prompt"],
        question_text=row["question_text"],
        options=options,
        explanation=row["explanation"],
        created_at=_from_db_time(row["created_at"]),
    )


def _row_to_attempt(row: sqlite3.Row) -> Attempt:
    return Attempt(
        id=row["id"],
        question_id=row["question_id"],
        selected_label=row["selected_label"],
        is_correct=bool(row["is_correct"]),
        answered_at=_from_db_time(row["answered_at"]),
    )


class JsonlQuestionArchive(QuestionArchive):
    """Appends every synthesized question to a local JSON-lines file."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def append(self, question: Question) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        line = question.model_dump_json()
        with self._lock:
            with self._path.open("a", encoding="utf-8") as handle:
                handle.write(line + "\n")


class SqliteQuizStore(QuestionRepository, AttemptRepository):
    """Stores questions and answer attempts in a SQLite database."""

    def __init__(self, db_path: Path, timeout: float = 30.0) -> None:
        self._db_path = Path(db_path)
        self._lock = threading.Lock()
        try:
            if self._db_path.parent != Path("."):
                self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(
                self._db_path, timeout=timeout, check_same_thread=False, isolation_level=None
            )
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA foreign_keys = ON")
            self._initialise_schema()
        except (OSError, sqlite3.Error) as exc:
            raise StoreError(f"Unable to open question store at {self._db_path}") from exc

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    @contextmanager
    def _transaction(self, immediate: bool = False) -> Iterator[sqlite3.Connection]:
        with self._lock:
            self._conn.execute("BEGIN IMMEDIATE" if immediate else "BEGIN")
            try:
                yield self._conn
                self._conn.commit()
            except BaseException:
                if self._conn.in_transaction:
                    self._conn.rollback()
                raise

    def _initialise_schema(self) -> None:
        with self._lock:
            self._conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS questions (
                    id TEXT PRIMARY KEY,
                    source_reference TEXT NOT NULL,
                    prompt TEXT NOT NULL,
                    question_text TEXT NOT NULL,
                    options_json TEXT NOT NULL,
                    correct_label TEXT NOT NULL,
                    explanation TEXT NOT NULL,
                    created_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS attempts (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    question_id TEXT NOT NULL REFERENCES questions(id),
                    selected_label TEXT NOT NULL,
                    is_correct INTEGER NOT NULL,
                    answered_at TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_attempts_question ON attempts (question_id);
                CREATE INDEX IF NOT EXISTS idx_attempts_answered_at ON attempts (answered_at);
                """
            )

    # QuestionRepository -------------------------------------------------
    def create_question(self, question: Question) -> None:
        options_json = json.dumps([option.model_dump() for option in question.options])
        try:
            with self._transaction(immediate=True) as conn:
                existing = conn.execute(
                    "SELECT 1 FROM questions WHERE id = ?", (question.id,)
                ).fetchone()
                if existing:
                    raise DuplicateIdError(question.id)
                conn.execute(
                    """
                    INSERT INTO questions (
                        id, source_reference, prompt, question_text,
                        options_json, correct_label, explanation, created_at
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        question.id,
                        question.source_reference,
                        question.prompt,
                        question.question_text,
                        options_json,
                        question.correct_option.label,
                        question.explanation,
                        _to_db_time(question.created_at),
                    ),
                )
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to store question {question.id}") from exc

    def get_question(self, question_id: str) -> Optional[Question]:
        try:
            with self._lock:
                row = self._conn.execute(
                    "SELECT * FROM questions WHERE id = ?", (question_id,)
                ).fetchone()
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to load question {question_id}") from exc
        if not row:
            return None
        return _row_to_question(row)

    # AttemptRepository --------------------------------------------------
    def record_attempt(
        self,
        question_id: str,
        selected_label: str,
        answered_at: Optional[datetime] = None,
    ) -> AnswerResult:
        label = selected_label.strip().upper()
        answered_at = answered_at or utcnow()
        try:
            with self._transaction(immediate=True) as conn:
                row = conn.execute(
                    "SELECT * FROM questions WHERE id = ?", (question_id,)
                ).fetchone()
                if not row:
                    raise QuestionNotFoundError(question_id)
                is_correct = label == row["correct_label"].upper()
                previous = conn.execute(
                    "SELECT COUNT(*) FROM attempts WHERE question_id = ?", (question_id,)
                ).fetchone()[0]
                cursor = conn.execute(
                    """
                    INSERT INTO attempts (question_id, selected_label, is_correct, answered_at)
                    VALUES (?, ?, ?, ?)
                    """,
                    (question_id, label, int(is_correct), _to_db_time(answered_at)),
                )
                attempt_id = cursor.lastrowid
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to record attempt for question {question_id}") from exc

        attempt = Attempt(
            id=attempt_id,
            question_id=question_id,
            selected_label=label,
            is_correct=is_correct,
            answered_at=_from_db_time(_to_db_time(answered_at)),
        )
        return AnswerResult(
            question=_row_to_question(row), attempt=attempt, first_attempt=previous == 0
        )

    def list_attempts(self, question_id: str) -> List[Attempt]:
        try:
            with self._lock:
                rows = self._conn.execute(
                    "SELECT * FROM attempts WHERE question_id = ? ORDER BY answered_at, id",
                    (question_id,),
                ).fetchall()
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to list attempts for question {question_id}") from exc
        return [_row_to_attempt(row) for row in rows]

    def get_recent_attempts(
        self, since: Optional[datetime] = None, first_only: bool = False
    ) -> List[Attempt]:
        """Return attempts answered at or after ``since``.

        With ``first_only`` only the earliest attempt of each question is
        returned, which is what the streak policy counts.
        """

        clauses = []
        params: list = []
        if since is not None:
            clauses.append("answered_at >= ?")
            params.append(_to_db_time(since))
        if first_only:
            clauses.append("id IN (SELECT MIN(id) FROM attempts GROUP BY question_id)")
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        try:
            with self._lock:
                rows = self._conn.execute(
                    f"SELECT * FROM attempts {where} ORDER BY answered_at, id", params
                ).fetchall()
        except sqlite3.Error as exc:
            raise StoreError("Failed to list recent attempts") from exc
        return [_row_to_attempt(row) for row in rows]


__all__ = ["JsonlQuestionArchive", "SqliteQuizStore"]
