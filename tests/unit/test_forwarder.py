"""
Tests for hireflow.core.proxy.forwarder: not-found fallback forwarding.
"""

import asyncio

import httpx
import pytest

from hireflow.core.proxy.forwarder import (
    FormEntry,
    WebhookForwarder,
    build_multipart,
    decode_body,
)

WEBHOOK_URL = "https://n8n.example.com/webhook/candidate-screening"

TEST_VARIANT = "https://n8n.example.com/webhook-test/candidate-screening"


def sample_entries() -> list[FormEntry]:
    return [
        FormEntry(name="job_id", value="job-42"),
        FormEntry(name="user_id", value="user-1"),
        FormEntry(name="file", filename="jane.pdf", content=b"%PDF jane", content_type="application/pdf"),
    ]


def forward_with(handler, entries=None, url: str = WEBHOOK_URL):
    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            forwarder = WebhookForwarder(url, client, timeout=5)
            return await forwarder.forward(entries if entries is not None else sample_entries())

    return asyncio.run(run())


class TestDecodeBody:
    def test_json_object(self):
        assert decode_body('{"match_score": 91}') == {"match_score": 91}

    def test_json_list(self):
        assert decode_body('[{"name": "Jane"}]') == [{"name": "Jane"}]

    def test_plain_text_is_wrapped(self):
        assert decode_body("Workflow was started") == {"raw": "Workflow was started"}

    def test_empty_body_is_wrapped(self):
        assert decode_body("") == {"raw": ""}

    @pytest.mark.parametrize("text", ['{"match_score": NaN}', "Infinity", '[-Infinity]'])
    def test_non_finite_constants_are_wrapped(self, text):
        assert decode_body(text) == {"raw": text}


class TestBuildMultipart:
    def test_fields_and_files_share_one_list(self):
        parts = build_multipart(sample_entries())
        assert parts == [
            ("job_id", (None, "job-42")),
            ("user_id", (None, "user-1")),
            ("file", ("jane.pdf", b"%PDF jane", "application/pdf")),
        ]

    def test_repeated_keys_are_kept(self):
        parts = build_multipart([FormEntry(name="tag", value="a"), FormEntry(name="tag", value="b")])
        assert parts == [("tag", (None, "a")), ("tag", (None, "b"))]

    def test_entry_order_is_preserved_on_the_wire(self):
        entries = [
            FormEntry(name="file", filename="jane.pdf", content=b"%PDF jane", content_type="application/pdf"),
            FormEntry(name="job_id", value="job-42"),
        ]
        bodies = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(request.content)
            return httpx.Response(200, json={"ok": True})

        forward_with(handler, entries=entries)

        body = bodies[0]
        assert body.index(b'name="file"') < body.index(b'name="job_id"')
        assert b'name="job_id"\r\n\r\njob-42' in body


class TestWebhookForwarder:
    def test_first_success_is_returned_without_fallback(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, json={"match_score": 88})

        result = forward_with(handler)

        assert result.status_code == 200
        assert result.payload == {"match_score": 88}
        assert seen == [WEBHOOK_URL]

    def test_404_falls_back_to_next_variant(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if str(request.url) == WEBHOOK_URL:
                return httpx.Response(404, json={"message": "webhook not registered"})
            return httpx.Response(200, json={"name": "Jane Doe", "match_score": 77})

        result = forward_with(handler)

        assert result.status_code == 200
        assert result.payload == {"name": "Jane Doe", "match_score": 77}
        assert result.url == TEST_VARIANT
        assert result.attempts == [(WEBHOOK_URL, 404), (TEST_VARIANT, 200)]

    def test_all_404_relays_last_response(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(404, json={"message": f"not found: {request.url.path}"})

        result = forward_with(handler)

        assert result.status_code == 404
        assert len(seen) == 4
        assert result.url == seen[-1]
        assert result.payload == {"message": "not found: /webhook-test/resume-screening"}

    def test_non_404_error_is_not_retried(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(500, json={"message": "workflow crashed"})

        result = forward_with(handler)

        assert result.status_code == 500
        assert result.payload == {"message": "workflow crashed"}
        assert seen == [WEBHOOK_URL]

    def test_non_json_body_is_wrapped(self):
        result = forward_with(lambda request: httpx.Response(200, text="Workflow was started"))
        assert result.payload == {"raw": "Workflow was started"}

    def test_every_attempt_carries_the_full_submission(self):
        bodies = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(request.content)
            return httpx.Response(404, text="missing")

        forward_with(handler)

        assert len(bodies) == 4
        for body in bodies:
            assert b"%PDF jane" in body
            assert b'filename="jane.pdf"' in body
            assert b"job-42" in body

    def test_transport_error_propagates(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused")

        with pytest.raises(httpx.ConnectError):
            forward_with(handler)

    def test_unresolvable_primary_is_tried_alone(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(404, text="nope")

        result = forward_with(handler, url="https://n8n.example.com/hooks/screen")

        assert seen == ["https://n8n.example.com/hooks/screen"]
        assert result.status_code == 404
        assert result.payload == {"raw": "nope"}

    def test_redirect_is_followed_to_the_webhook(self):
        moved_to = "https://n8n-new.example.com/webhook/candidate-screening"
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append((request.method, str(request.url)))
            if str(request.url) == WEBHOOK_URL:
                return httpx.Response(308, headers={"Location": moved_to}, text="moved")
            return httpx.Response(200, json={"name": "Jane"})

        result = forward_with(handler)

        assert result.status_code == 200
        assert result.payload == {"name": "Jane"}
        assert seen == [("POST", WEBHOOK_URL), ("POST", moved_to)]
        assert result.attempts == [(WEBHOOK_URL, 200)]
