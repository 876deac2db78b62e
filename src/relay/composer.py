"""Rewrite prompt for the LLM pass over a document-QA answer."""

from __future__ import annotations

REWRITE_TEMPLATE = (
    "This is prompt: '{prompt}'; And this is response: '{answer}'. "
    "I want you to make my response correct according to prompt. "
    "If the response already answers the prompt, give me the response only, unchanged. "
    "If you are not sure whether the response is correct but it seems like it could be, "
    "give me the response as a single paragraph. "
    "If you think the response is not correct, correct it according to the prompt "
    "and give it as a single paragraph. "
    "For example, if the prompt is 'Hi' or 'Hello' and the response does not align with it, "
    "just reply 'Hi, how can I assist you today?' or something similar. "
    "Every time, reply with exactly one paragraph containing only the response, "
    "with no additional commentary."
)


def compose_rewrite_prompt(original_prompt: str, raw_answer: str) -> str:
    """Embed the user's text and the raw answer verbatim in the rewrite instruction."""
    return REWRITE_TEMPLATE.format(prompt=original_prompt, answer=raw_answer)
