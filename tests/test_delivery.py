"""Tests for rendering and sending questions through the delivery channel."""
from __future__ import annotations

import asyncio

from leetquiz.delivery import DeliveryChannel, build_actions, render_question


def test_actions_encode_question_id_and_label(question):
    actions = build_actions(question)

    assert [[button.payload for button in row] for row in actions] == [
        ["answer:A:Q1"],
        ["answer:B:Q1"],
        ["answer:C:Q1"],
        ["answer:D:Q1"],
    ]
    assert [row[0].text for row in actions] == ["A", "B", "C", "D"]


def test_rendered_question_hides_correctness(question):
    text = render_question(question)

    assert "A. Sort the array and use two pointers" in text
    assert "D. Binary search for each complement" in text
    assert "correct" not in text.lower()


def test_rendered_text_escapes_markdown(question):
    tricky = question.model_copy(update={"question_text": "What does *args_list* hold?"})

    assert "\\*args\\_list\\*" in render_question(tricky)


def test_deliver_sends_context_before_question(question, transport, metrics):
    channel = DeliveryChannel(transport, message_delay=0, metrics=metrics)

    delivered = asyncio.run(channel.deliver(question))

    assert delivered is True
    (context_text, context_actions), (question_text, question_actions) = transport.sent
    assert context_text.startswith("*Leetcode Question:*")
    assert context_actions is None
    assert question_text.startswith("*Question:*")
    assert len(question_actions) == 4
    assert metrics.deliveries_sent == 1


def test_failed_context_message_skips_question(question, transport, metrics):
    transport.fail_send_at = 0
    channel = DeliveryChannel(transport, message_delay=0, metrics=metrics)

    delivered = asyncio.run(channel.deliver(question))

    assert delivered is False
    assert transport.sent == []
    assert metrics.deliveries_failed == 1


def test_failed_question_message_is_reported_not_raised(question, transport, metrics):
    transport.fail_send_at = 1
    channel = DeliveryChannel(transport, message_delay=0, metrics=metrics)

    delivered = asyncio.run(channel.deliver(question))

    assert delivered is False
    assert len(transport.sent) == 1
