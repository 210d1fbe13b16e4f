"""Encoding and decoding of inline-button payloads.

A payload is the only state carried across the gap between sending a
question and receiving the answer, so it has to identify both the question
and the chosen option: ``answer:<label>:<question id>``.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

from .models import QUESTION_ID_PATTERN


ANSWER_KIND = "answer"
SEPARATOR = ":"
# Telegram rejects callback data longer than 64 bytes.
MAX_PAYLOAD_BYTES = 64
_LABEL_PATTERN = re.compile(r"[A-Za-z]")


@dataclass(frozen=True)
class DecodedAction:
    kind: str
    selected_label: str
    question_id: str


@dataclass(frozen=True)
class ActionDecodeFailure:
    reason: str
    raw: str


ActionDecodeResult = Union[DecodedAction, ActionDecodeFailure]


def encode_action(question_id: str, label: str, kind: str = ANSWER_KIND) -> str:
    if not QUESTION_ID_PATTERN.fullmatch(question_id):
        raise ValueError(f"Question id {question_id!r} cannot be encoded in a payload")
    if not _LABEL_PATTERN.fullmatch(label):
        raise ValueError(f"Option label {label!r} must be a single letter")
    payload = SEPARATOR.join((kind, label.upper(), question_id))
    if len(payload.encode("utf-8")) > MAX_PAYLOAD_BYTES:
        raise ValueError(f"Payload for question {question_id} exceeds {MAX_PAYLOAD_BYTES} bytes")
    return payload


def decode_action(data: object) -> ActionDecodeResult:
    """Decode a payload; never raises, returns ``ActionDecodeFailure`` instead."""

    if not isinstance(data, str) or not data:
        return ActionDecodeFailure(reason="empty payload", raw=str(data or ""))
    parts = data.split(SEPARATOR)
    if len(parts) != 3:
        return ActionDecodeFailure(reason=f"expected 3 fields, got {len(parts)}", raw=data)
    kind, label, question_id = parts
    if kind != ANSWER_KIND:
        return ActionDecodeFailure(reason=f"unknown action kind {kind!r}", raw=data)
    if not _LABEL_PATTERN.fullmatch(label):
        return ActionDecodeFailure(reason=f"invalid option label {label!r}", raw=data)
    if not question_id:
        return ActionDecodeFailure(reason="missing question id", raw=data)
    if not QUESTION_ID_PATTERN.fullmatch(question_id):
        return ActionDecodeFailure(reason=f"invalid question id {question_id!r}", raw=data)
    return DecodedAction(kind=kind, selected_label=label.upper(), question_id=question_id)


__all__ = [
    "ANSWER_KIND",
    "ActionDecodeFailure",
    "ActionDecodeResult",
    "DecodedAction",
    "decode_action",
    "encode_action",
]
