"""Tests for the rewrite prompt composer."""

from __future__ import annotations

from src.relay.composer import compose_rewrite_prompt


def test_embeds_prompt_and_answer_verbatim() -> None:
    prompt = compose_rewrite_prompt("What is the capital of France?", "Paris is the capital of France.")
    assert "What is the capital of France?" in prompt
    assert "Paris is the capital of France." in prompt


def test_requires_single_paragraph_without_commentary() -> None:
    prompt = compose_rewrite_prompt("q", "a").lower()
    assert "one paragraph" in prompt
    assert "no additional commentary" in prompt


def test_asks_for_correctness_check() -> None:
    assert "correct" in compose_rewrite_prompt("q", "a").lower()


def test_braces_in_input_are_kept_literally() -> None:
    prompt = compose_rewrite_prompt("use {name}", "answer {0}")
    assert "use {name}" in prompt
    assert "answer {0}" in prompt


def test_is_deterministic() -> None:
    assert compose_rewrite_prompt("q", "a") == compose_rewrite_prompt("q", "a")
