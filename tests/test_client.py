"""Async API client behaviour against a mocked transport"""

import asyncio
import json

import httpx
import pytest

from propodesk.client import ApiError, PropodeskClient


def comment(id, content, parent=None, block="intro"):
    return {
        "id": id,
        "proposal_id": 7,
        "author_name": "Buyer",
        "content": content,
        "block_id": block,
        "parent_comment_id": parent,
        "is_resolved": False,
        "created_at": "2026-03-01T10:00:00",
        "replies": [],
    }


def make_client(handler, token="tok-123"):
    return PropodeskClient("http://api.test/", token=token, transport=httpx.MockTransport(handler))


def run(coro):
    return asyncio.run(coro)


class TestRequests:
    def test_sends_bearer_token_and_json(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers.get("authorization")
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"totals": {"monthly_total": 1000}})

        async def scenario():
            async with make_client(handler) as api:
                return await api.calculate_quote({"services": {"traffic": 1}})

        result = run(scenario())
        assert result["totals"]["monthly_total"] == 1000
        assert seen["auth"] == "Bearer tok-123"
        assert seen["url"] == "http://api.test/calculators/quote"
        assert seen["body"] == {"services": {"traffic": 1}}

    def test_no_token_no_header(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers.get("authorization")
            return httpx.Response(200, json={"services": {}})

        async def scenario():
            async with make_client(handler, token=None) as api:
                await api.get_catalog()

        run(scenario())
        assert seen["auth"] is None

    def test_error_carries_status_and_detail(self):
        def handler(request):
            return httpx.Response(404, json={"detail": "Proposal not found"})

        async def scenario():
            async with make_client(handler) as api:
                await api.get_proposal(99)

        with pytest.raises(ApiError) as exc:
            run(scenario())
        assert exc.value.status_code == 404
        assert exc.value.detail == "Proposal not found"

    def test_error_without_json_body(self):
        def handler(request):
            return httpx.Response(502, text="Bad gateway")

        async def scenario():
            async with make_client(handler) as api:
                await api.send_contract(3)

        with pytest.raises(ApiError) as exc:
            run(scenario())
        assert exc.value.detail == "Bad gateway"

    def test_share_link_password_is_a_query_param(self):
        seen = {}

        def handler(request):
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json={"proposal": {"id": 1}})

        async def scenario():
            async with make_client(handler) as api:
                await api.open_shared_proposal("abc", password="s3cret")

        run(scenario())
        assert seen["params"] == {"password": "s3cret"}

    def test_list_comments_parses_models(self):
        def handler(request):
            assert request.url.params.get("block_id") == "intro"
            return httpx.Response(200, json={"comments": [comment(1, "Hi")], "threads": []})

        async def scenario():
            async with make_client(handler) as api:
                return await api.list_comments(7, block_id="intro")

        comments = run(scenario())
        assert [c.content for c in comments] == ["Hi"]

    @pytest.mark.parametrize(
        "call, method, path",
        [
            (lambda api: api.save_version(4, label="v1"), "POST", "/proposals/4/versions"),
            (lambda api: api.restore_version(4, 2), "POST", "/proposals/4/versions/2/restore"),
            (lambda api: api.invoice_from_contract(9), "POST", "/invoices/from-contract/9"),
        ],
    )
    def test_routes(self, call, method, path):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["path"] = request.url.path
            return httpx.Response(200, json={"id": 1})

        async def scenario():
            async with make_client(handler) as api:
                return await call(api)

        assert run(scenario()) == {"id": 1}
        assert seen == {"method": method, "path": path}


class TestWatchComments:
    def test_yields_threads_and_skips_failed_polls(self):
        responses = [
            httpx.Response(500, json={"detail": "boom"}),
            httpx.Response(200, json={"comments": [comment(1, "Root"), comment(2, "Reply", parent=1)]}),
            httpx.Response(200, json={"comments": [comment(3, "Other", block="pricing")]}),
        ]

        def handler(request):
            return responses.pop(0)

        async def scenario():
            seen = []
            async with make_client(handler) as api:
                async for threads in api.watch_comments(7, interval=0):
                    seen.append(threads)
                    if len(seen) == 2:
                        break
            return seen

        first, second = run(scenario())
        assert [t.id for t in first] == [1]
        assert [r.id for r in first[0].replies] == [2]
        assert [t.id for t in second] == [3]

    def test_block_filter(self):
        def handler(request):
            return httpx.Response(
                200, json={"comments": [comment(1, "A"), comment(2, "B", block="pricing")]}
            )

        async def scenario():
            async with make_client(handler) as api:
                async for threads in api.watch_comments(7, interval=0, block_id="pricing"):
                    return threads

        threads = run(scenario())
        assert [t.id for t in threads] == [2]
