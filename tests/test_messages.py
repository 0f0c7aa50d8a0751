"""Tests for message parsing and routing."""

import pytest

from pageaudit.errors import UnknownMessageError
from pageaudit.modules.audit.messages import (
    HeadersEvent,
    NavigationEvent,
    RequestCompletedEvent,
    StateQuery,
    TargetClosedEvent,
    parse_message,
)


class TestParseMessage:
    """Test envelope parsing into message variants."""

    def test_state_query(self):
        assert parse_message({"type": "GET_TAB_STATE", "target": 5}) == StateQuery(target=5)

    def test_state_query_accepts_tab_id_alias(self):
        assert parse_message({"type": "GET_TAB_STATE", "tabId": 5}) == StateQuery(target=5)

    def test_headers_event_collects_name_value_pairs(self):
        message = parse_message(
            {
                "type": "HEADERS_RECEIVED",
                "targetId": 2,
                "resourceKind": "document-level",
                "url": "https://example.com",
                "statusCode": 200,
                "headers": [{"name": "X-A", "value": "1"}, {"name": "", "value": "skip"}],
            }
        )

        assert message == HeadersEvent(
            target_id=2,
            resource_kind="document-level",
            url="https://example.com",
            status_code=200,
            headers=(("X-A", "1"),),
        )

    def test_navigation_and_completion_and_close(self):
        assert parse_message({"type": "NAVIGATION_START", "targetId": 1, "frameDepth": 0}) == (
            NavigationEvent(target_id=1, frame_depth=0)
        )
        assert parse_message(
            {"type": "REQUEST_COMPLETED", "targetId": 1, "url": "https://x", "resourceKind": "script"}
        ) == RequestCompletedEvent(target_id=1, url="https://x", resource_kind="script")
        assert parse_message({"type": "TARGET_CLOSED", "targetId": 1}) == TargetClosedEvent(target_id=1)

    @pytest.mark.parametrize(
        "payload",
        [
            None,
            "GET_TAB_STATE",
            {},
            {"type": "PING"},
            {"type": "GET_TAB_STATE"},
            {"type": "GET_TAB_STATE", "target": "abc"},
            {"type": "NAVIGATION_START", "targetId": True, "frameDepth": 0},
        ],
    )
    def test_rejects_unknown_or_malformed(self, payload):
        with pytest.raises(UnknownMessageError):
            parse_message(payload)


class TestMessageRouter:
    """Test dispatch to the tracker and document registry."""

    def test_state_query_for_unknown_target_never_fails(self, router):
        assert router.handle({"type": "GET_TAB_STATE", "target": 42}) == {
            "ok": True,
            "state": {"mainFrame": None, "requests": []},
        }

    def test_document_level_headers_update_main_frame(self, router, tracker):
        router.handle(
            {
                "type": "HEADERS_RECEIVED",
                "targetId": 1,
                "resourceKind": "document-level",
                "url": "https://example.com",
                "statusCode": 200,
                "headers": [{"name": "Referrer-Policy", "value": "no-referrer"}],
            }
        )

        frame = tracker.get_state(1).main_frame
        assert frame is not None
        assert frame.header("referrer-policy") == "no-referrer"

    def test_subresource_headers_do_not_touch_main_frame(self, router, tracker):
        reply = router.handle(
            {
                "type": "HEADERS_RECEIVED",
                "targetId": 1,
                "resourceKind": "script",
                "url": "https://example.com/a.js",
                "statusCode": 200,
                "headers": [],
            }
        )

        assert reply == {"ok": True}
        assert tracker.get_state(1).main_frame is None

    def test_navigation_then_query_returns_empty_state(self, router, tracker, documents, make_document):
        tracker.on_request_completed(1, "https://example.com/a.js", "script")
        documents.attach(1, make_document("<p>x</p>"))

        router.handle({"type": "NAVIGATION_START", "targetId": 1, "frameDepth": 0})

        reply = router.handle({"type": "GET_TAB_STATE", "target": 1})
        assert reply["state"] == {"mainFrame": None, "requests": []}
        assert documents.get(1) is None

    def test_request_completed_appends(self, router, tracker):
        router.handle(
            {"type": "REQUEST_COMPLETED", "targetId": 3, "url": "https://x/a.png", "resourceKind": "image"}
        )
        assert tracker.get_state(3).to_dict()["requests"] == [{"url": "https://x/a.png", "type": "image"}]

    def test_target_closed_drops_state_and_document(self, router, tracker, documents, make_document):
        tracker.on_request_completed(1, "https://x", "script")
        documents.attach(1, make_document(""))

        router.handle({"type": "TARGET_CLOSED", "targetId": 1})

        assert tracker.known_targets() == []
        assert documents.get(1) is None

    def test_content_audit_without_document_is_soft_failure(self, router):
        reply = router.handle({"type": "RUN_CONTENT_AUDIT", "target": 9})
        assert reply["ok"] is False
        assert "9" in reply["error"]

    def test_content_audit_returns_signals(self, router, documents, make_document):
        documents.attach(1, make_document('<a target="_blank" href="/x">x</a>'))

        reply = router.handle({"type": "RUN_CONTENT_AUDIT", "target": 1})

        assert reply["ok"] is True
        assert [signal["kind"] for signal in reply["signals"]] == ["TABNABBING_RISK"]
        assert reply["data"]["tabnabbing"][0]["href"] == "/x"

    def test_unknown_message_is_rejected(self, router):
        reply = router.handle({"type": "SELF_DESTRUCT"})
        assert reply["ok"] is False
        assert "SELF_DESTRUCT" in reply["error"]

    def test_dispatch_rejects_foreign_objects(self, router):
        with pytest.raises(UnknownMessageError):
            router.dispatch(object())
