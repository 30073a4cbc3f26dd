"""
Table Query Component Tests

select/insert/update/delete requests against a mocked REST endpoint.
"""
import asyncio

import httpx
import pytest

from core.hosted import APIResponse, PostgrestError
from tests.fixtures import (
    ANON_KEY,
    AUTH_URL,
    REST_URL,
    STORAGE_KEY,
    make_expired_session_payload,

    make_item_row,
    make_item_rows,
    make_session_cookie_header,
    make_session_payload,
)

pytestmark = [pytest.mark.component]

ITEMS_URL = f"{REST_URL}/items"


class TestSelect:

    @pytest.mark.asyncio
    async def test_select_ordered(self, make_bridged, mock_http_client):
        rows = make_item_rows(3)
        mock_http_client.set_response("GET", ITEMS_URL, 200, rows)

        response = await make_bridged().handle.table("items").select("*").order("id").execute()

        assert isinstance(response, APIResponse)
        assert response.data == rows
        assert response.count is None
        request, = mock_http_client.get_requests("GET", "/rest/v1/items")
        assert request["params"] == [("select", "*"), ("order", "id.asc")]
        assert request["headers"]["apikey"] == ANON_KEY

    @pytest.mark.asyncio
    async def test_anonymous_request_uses_access_key(self, make_bridged, mock_http_client):
        mock_http_client.set_response("GET", ITEMS_URL, 200, [])

        await make_bridged().handle.table("items").select().execute()

        request, = mock_http_client.requests
        assert request["headers"]["Authorization"] == f"Bearer {ANON_KEY}"

    @pytest.mark.asyncio
    async def test_signed_in_request_uses_session_token(
        self, make_bridged, mock_http_client, session_payload
    ):
        mock_http_client.set_response("GET", ITEMS_URL, 200, [])
        bridged = make_bridged(make_session_cookie_header(session_payload))

        await bridged.handle.from_("items").select("id,name").execute()

        request, = mock_http_client.requests
        assert request["headers"]["Authorization"] == f"Bearer {session_payload['access_token']}"
        assert dict(request["params"])["select"] == "id,name"

    @pytest.mark.asyncio
    async def test_exact_count(self, make_bridged, mock_http_client):
        mock_http_client.set_response(
            "GET", ITEMS_URL, 200, make_item_rows(2), headers={"content-range": "0-1/2"}
        )

        response = await make_bridged().handle.table("items").select("*", count="exact").limit(2).execute()

        assert response.count == 2
        request, = mock_http_client.requests
        assert request["headers"]["Prefer"] == "count=exact"
        assert dict(request["params"])["limit"] == "2"

    @pytest.mark.asyncio
    async def test_descending_order_and_filters(self, make_bridged, mock_http_client):
        mock_http_client.set_response("GET", ITEMS_URL, 200, [])

        await (
            make_bridged().handle.table("items")
            .select("*")
            .eq("done", True)
            .eq("owner", None)
            .order("created_at", desc=True)
            .execute()
        )

        request, = mock_http_client.requests
        assert request["params"] == [
            ("select", "*"),
            ("order", "created_at.desc"),
            ("done", "eq.true"),
            ("owner", "eq.null"),
        ]


    @pytest.mark.asyncio
    async def test_repeated_column_filters_are_all_sent(self, make_bridged, mock_http_client):
        mock_http_client.set_response("GET", ITEMS_URL, 200, [])

        await make_bridged().handle.table("items").select("*").eq("id", 1).eq("id", 2).execute()

        request, = mock_http_client.requests
        assert request["params"] == [("select", "*"), ("id", "eq.1"), ("id", "eq.2")]


class TestWrites:

    @pytest.mark.asyncio
    async def test_insert(self, make_bridged, mock_http_client):
        row = make_item_row(4, "Pen", "Blue")
        mock_http_client.set_response("POST", ITEMS_URL, 201, [row])

        response = await make_bridged().handle.table("items").insert(
            {"name": "Pen", "description": "Blue"}
        ).execute()

        assert response.data == [row]
        request, = mock_http_client.get_requests("POST")
        assert request["json"] == {"name": "Pen", "description": "Blue"}
        assert request["headers"]["Prefer"] == "return=representation"

    @pytest.mark.asyncio
    async def test_update(self, make_bridged, mock_http_client):
        row = make_item_row(5, "Pencil", "Red")
        mock_http_client.set_response("PATCH", ITEMS_URL, 200, [row])

        response = await make_bridged().handle.table("items").update(
            {"name": "Pencil", "description": "Red"}
        ).eq("id", 5).execute()

        assert response.data == [row]
        request, = mock_http_client.get_requests("PATCH")
        assert request["params"] == [("id", "eq.5")]
        assert request["json"] == {"name": "Pencil", "description": "Red"}

    @pytest.mark.asyncio
    async def test_delete(self, make_bridged, mock_http_client):
        mock_http_client.set_response("DELETE", ITEMS_URL, 200, [make_item_row(5)])

        response = await make_bridged().handle.table("items").delete().eq("id", "5").execute()

        assert len(response.data) == 1
        request, = mock_http_client.get_requests("DELETE")
        assert request["params"] == [("id", "eq.5")]
        assert "json" not in request

    @pytest.mark.asyncio
    async def test_empty_body(self, make_bridged, mock_http_client):
        mock_http_client.set_response("DELETE", ITEMS_URL, 204)

        response = await make_bridged().handle.table("items").delete().eq("id", 9).execute()

        assert response.data == []

    @pytest.mark.asyncio
    async def test_single_object_body_is_wrapped(self, make_bridged, mock_http_client):
        row = make_item_row(1)
        mock_http_client.set_response("POST", ITEMS_URL, 201, row)

        response = await make_bridged().handle.table("items").insert(row).execute()

        assert response.data == [row]


class TestErrors:

    @pytest.mark.asyncio
    async def test_rejected_request(self, make_bridged, mock_http_client):
        mock_http_client.set_response("POST", ITEMS_URL, 400, {
            "code": "23502",
            "message": 'null value in column "name" violates not-null constraint',
            "details": None,
            "hint": None,
        })

        with pytest.raises(PostgrestError) as exc_info:
            await make_bridged().handle.table("items").insert({"description": "x"}).execute()

        assert exc_info.value.code == "23502"
        assert exc_info.value.status_code == 400
        assert "not-null" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_row_level_policy_violation(self, make_bridged, mock_http_client, session_payload):
        mock_http_client.set_response("PATCH", ITEMS_URL, 403, {
            "code": "42501",
            "message": 'new row violates row-level security policy for table "items"',
        })
        bridged = make_bridged(make_session_cookie_header(session_payload))

        with pytest.raises(PostgrestError) as exc_info:
            await bridged.handle.table("items").update({"name": "x"}).eq("id", 1).execute()

        assert exc_info.value.code == "42501"

    @pytest.mark.asyncio
    async def test_non_json_error(self, make_bridged, mock_http_client):
        mock_http_client.set_response("GET", ITEMS_URL, 502, text="Bad Gateway")

        with pytest.raises(PostgrestError) as exc_info:
            await make_bridged().handle.table("items").select().execute()

        assert exc_info.value.message == "Bad Gateway"
        assert exc_info.value.code is None

    @pytest.mark.asyncio
    async def test_unreachable_endpoint(self, make_bridged, mock_http_client):
        mock_http_client.set_error(httpx.ConnectError("connection refused"), url_contains="/rest/v1")

        with pytest.raises(PostgrestError) as exc_info:
            await make_bridged().handle.table("items").select().execute()

        assert exc_info.value.code == "network_error"
        assert exc_info.value.status_code is None
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


class TestConcurrentQueries:
    """Several queries in flight through one handle"""

    @pytest.mark.asyncio
    async def test_expiring_session_is_refreshed_once(self, make_bridged, mock_http_client, user_payload):
        expired = make_expired_session_payload(user=user_payload)
        fresh = make_session_payload(user=user_payload)
        mock_http_client.set_response("POST", f"{AUTH_URL}/token", 200, fresh)
        mock_http_client.set_response("GET", ITEMS_URL, 200, [])
        mock_http_client.yield_control = True
        bridged = make_bridged(make_session_cookie_header(expired))

        await asyncio.gather(
            bridged.handle.table("items").select("*").execute(),
            bridged.handle.table("items").select("*").execute(),
        )

        assert len(mock_http_client.get_requests("POST", "/token")) == 1
        headers = bridged.response_headers.get_all("Set-Cookie")
        assert len(headers) == 1
        assert headers[0].startswith(f"{STORAGE_KEY}=base64-")
        selects = mock_http_client.get_requests("GET", "/rest/v1/items")
        assert [r["headers"]["Authorization"] for r in selects] == [f"Bearer {fresh['access_token']}"] * 2

    @pytest.mark.asyncio
    async def test_results_stay_with_their_query(self, make_bridged, mock_http_client, session_payload):
        mock_http_client.set_response("GET", ITEMS_URL, 200, make_item_rows(2))
        mock_http_client.set_response("POST", ITEMS_URL, 201, [make_item_row(3, "Pen", "Blue")])
        mock_http_client.yield_control = True
        handle = make_bridged(make_session_cookie_header(session_payload)).handle

        listed, inserted = await asyncio.gather(
            handle.table("items").select("*").execute(),
            handle.table("items").insert({"name": "Pen", "description": "Blue"}).execute(),
        )

        assert len(listed.data) == 2
        assert inserted.data[0]["name"] == "Pen"
