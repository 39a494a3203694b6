import asyncio
import json

import respx
from httpx import AsyncClient, Response

LISTING_URL = "https://www.booking.com/searchresults.html"
ES_URL = "http://es.test:9200"

HOTEL_PAGE = """
<html><head><script>
booking.env.b_map_center_latitude = 53.8142;
booking.env.b_map_center_longitude = 58.6314;
</script></head><body>
<h2 class="hp__hotel-name">{name}</h2>
<span class="hp_address_subtitle">Abzakovo</span>
<div id="summary">Guest house</div>
</body></html>
"""


def _mock_listing(*hotel_ids):
    items = "".join(
        f'<div class="sr_item"><a class="hotel_name_link url" href="/hotel/ru/{h}.html">{h}</a></div>'
        for h in hotel_ids
    )
    respx.get(LISTING_URL).mock(
        return_value=Response(200, text=f"<html><body><div>{items}</div></body></html>")
    )


def _mock_hotel(hotel_id, ru_status=200):
    respx.get(f"https://www.booking.com/hotel/ru/{hotel_id}.ru.html").mock(
        return_value=Response(
            ru_status,
            text=HOTEL_PAGE.format(name=f"{hotel_id} ru"),
            headers={"content-type": "text/html"},
        )
    )
    respx.get(f"https://www.booking.com/hotel/ru/{hotel_id}.html").mock(
        return_value=Response(
            200,
            text=HOTEL_PAGE.format(name=f"{hotel_id} en"),
            headers={"content-type": "text/html"},
        )
    )


def _mock_index():
    return respx.put(url__regex=rf"{ES_URL}/booking-(ru|en)/_doc/.+").mock(
        return_value=Response(201, json={"result": "created"})
    )


async def _submit_and_wait(client: AsyncClient, json_body=None):
    resp = await client.post("/crawl", json=json_body)
    assert resp.status_code == 202
    data = resp.json()
    assert data["status"] == "pending"
    job_id = data["job_id"]

    for _ in range(50):
        await asyncio.sleep(0.05)
        status_resp = await client.get(f"/jobs/{job_id}")
        assert status_resp.status_code == 200
        job = status_resp.json()
        if job["status"] in ("completed", "failed"):
            return job
    raise AssertionError("crawl job did not finish")


@respx.mock
async def test_crawl_full_flow(client):
    _mock_listing("alpha", "beta")
    _mock_hotel("alpha")
    _mock_hotel("beta")
    index = _mock_index()

    job = await _submit_and_wait(client)

    assert job["status"] == "completed"
    result = job["result"]
    assert result["total_found"] == 2
    assert result["complete"] == 2
    assert result["indexed"] == 4
    assert index.call_count == 4

    docs = {
        call.request.url.path: json.loads(call.request.content) for call in index.calls
    }
    assert docs["/booking-ru/_doc/alpha"]["name"] == "alpha ru"
    assert docs["/booking-en/_doc/alpha"]["location"] == {"lat": 53.8142, "lon": 58.6314}
    assert docs["/booking-en/_doc/alpha"]["location"] == docs["/booking-ru/_doc/alpha"]["location"]


@respx.mock
async def test_crawl_partial_hotel(client):
    _mock_listing("alpha")
    _mock_hotel("alpha", ru_status=500)
    index = _mock_index()

    job = await _submit_and_wait(client)

    result = job["result"]
    assert result["partial"] == 1
    assert result["indexed"] == 1
    hotel = result["results"][0]
    assert hotel["status"] == "partial"
    assert hotel["indexed"] == ["en"]
    assert "ru" in hotel["fetch_errors"]
    assert index.call_count == 1


@respx.mock
async def test_crawl_empty_listing_fails_job(client):
    respx.get(LISTING_URL).mock(return_value=Response(200, text="<html></html>"))

    job = await _submit_and_wait(client)

    assert job["status"] == "failed"
    assert job["error"]


@respx.mock
async def test_crawl_sync(client):
    _mock_listing("alpha")
    _mock_hotel("alpha")
    _mock_index()

    resp = await client.post("/crawl/sync", json={"concurrency": 1})

    assert resp.status_code == 200
    assert resp.json()["indexed"] == 2


@respx.mock
async def test_crawl_sync_empty_listing(client):
    respx.get(LISTING_URL).mock(return_value=Response(200, text="<html></html>"))
    resp = await client.post("/crawl/sync")
    assert resp.status_code == 422


@respx.mock
async def test_crawl_sync_listing_unreachable(client):
    respx.get(LISTING_URL).mock(return_value=Response(503))
    resp = await client.post("/crawl/sync")
    assert resp.status_code == 502


async def test_job_not_found(client):
    resp = await client.get("/jobs/does-not-exist")
    assert resp.status_code == 404


async def test_crawl_sync_rejects_negative_concurrency(client):
    resp = await client.post("/crawl/sync", json={"concurrency": -1})
    assert resp.status_code == 422


async def test_crawl_sync_rejects_zero_concurrency(client):
    resp = await client.post("/crawl/sync", json={"concurrency": 0})
    assert resp.status_code == 422


async def test_crawl_job_rejects_zero_concurrency(client):
    resp = await client.post("/crawl", json={"concurrency": 0})
    assert resp.status_code == 422


@respx.mock
async def test_crawl_job_records_concurrency(client):
    _mock_listing("alpha")
    _mock_hotel("alpha")
    _mock_index()

    job = await _submit_and_wait(client, {"concurrency": 1})

    assert job["status"] == "completed"
    assert job["concurrency"] == 1
