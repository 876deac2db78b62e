"""Tests for inbound webhook event parsing."""

from __future__ import annotations

from src.messenger.events import (
    MessageEvent,
    PostbackEvent,
    UnknownEvent,
    extract_events,
    is_page_payload,
    parse_event,
)
from tests.conftest import make_messaging, make_page_payload


class TestPageObjectCheck:

    def test_page_payload_accepted(self) -> None:
        assert is_page_payload({"object": "page", "entry": []}) is True

    def test_other_objects_rejected(self) -> None:
        assert is_page_payload({"object": "instagram"}) is False
        assert is_page_payload({"entry": []}) is False

    def test_non_dict_rejected(self) -> None:
        assert is_page_payload(None) is False
        assert is_page_payload(["page"]) is False


class TestParseEvent:

    def test_text_message(self) -> None:
        event = parse_event(make_messaging(sender_id="42", text="hi"))
        assert event == MessageEvent(sender_id="42", text="hi")

    def test_numeric_sender_id_is_stringified(self) -> None:
        event = parse_event({"sender": {"id": 42}, "message": {"text": "hi"}})
        assert isinstance(event, MessageEvent)
        assert event.sender_id == "42"

    def test_postback(self) -> None:
        event = parse_event(make_messaging(text=None, postback={"payload": "GET_STARTED"}))
        assert isinstance(event, PostbackEvent)
        assert event.payload == {"payload": "GET_STARTED"}

    def test_attachment_only_message_is_unknown(self) -> None:
        event = parse_event({
            "sender": {"id": "1"},
            "message": {"attachments": [{"type": "image"}]},
        })
        assert isinstance(event, UnknownEvent)
        assert event.sender_id == "1"

    def test_blank_text_is_unknown(self) -> None:
        assert isinstance(parse_event(make_messaging(text="   ")), UnknownEvent)

    def test_non_string_text_is_unknown(self) -> None:
        event = parse_event({"sender": {"id": "1"}, "message": {"text": 123}})
        assert isinstance(event, UnknownEvent)

    def test_missing_sender_is_unknown(self) -> None:
        event = parse_event({"message": {"text": "hi"}})
        assert isinstance(event, UnknownEvent)
        assert event.sender_id is None

    def test_non_dict_item_is_unknown(self) -> None:
        assert isinstance(parse_event("garbage"), UnknownEvent)

    def test_delivery_receipt_is_unknown(self) -> None:
        event = parse_event({"sender": {"id": "1"}, "delivery": {"mids": ["m1"]}})
        assert isinstance(event, UnknownEvent)

    def test_echo_of_page_reply_is_unknown(self) -> None:
        event = parse_event({
            "sender": {"id": "page-1"},
            "message": {"is_echo": True, "text": "Paris is the capital of France."},
        })
        assert event == UnknownEvent(sender_id="page-1", reason="echo")


class TestExtractEvents:

    def test_flattens_entries_and_messaging(self) -> None:
        payload = {
            "object": "page",
            "entry": [
                {"messaging": [make_messaging("a", "one"), make_messaging("b", "two")]},
                {"messaging": [make_messaging("c", "three")]},
            ],
        }
        events = extract_events(payload)
        assert [e.sender_id for e in events] == ["a", "b", "c"]

    def test_empty_entry(self) -> None:
        assert extract_events({"object": "page", "entry": []}) == []

    def test_missing_entry(self) -> None:
        assert extract_events({"object": "page"}) == []

    def test_non_list_entry_is_ignored(self) -> None:
        assert extract_events({"object": "page", "entry": "nope"}) == []

    def test_entry_without_messaging_is_skipped(self) -> None:
        payload = {
            "object": "page",
            "entry": [{"changes": []}, {"messaging": [make_messaging("a")]}],
        }
        events = extract_events(payload)
        assert len(events) == 1

    def test_mixed_batch_keeps_every_item(self) -> None:
        payload = make_page_payload(
            make_messaging("a", "hi"),
            make_messaging("b", None, postback={"payload": "X"}),
            {"sender": {"id": "c"}, "read": {"watermark": 1}},
        )
        kinds = [type(e) for e in extract_events(payload)]
        assert kinds == [MessageEvent, PostbackEvent, UnknownEvent]
