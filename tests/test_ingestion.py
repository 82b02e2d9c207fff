"""Tests for the Yelp ingestion pipeline."""

import asyncio
from unittest.mock import patch

from fastapi import status
from fastapi.testclient import TestClient

from app.core.errors import StorageError, UpstreamAPIError
from app.main import app
from app.models.business import Business
from app.services.business_store import upsert_business
from app.schemas.ingest import IngestRequest
from app.services.ingestion import IngestionRun
from tests.factories import FakeYelpClient, make_yelp_business


async def _no_sleep(seconds):
    return None


def _run(db, yelp, **request):
    run = IngestionRun(db, yelp, IngestRequest(**request), locality_delay=0, sleep=_no_sleep)
    return asyncio.run(run.run())


def _example_city():
    return [
        make_yelp_business("starbucks-example", "Starbucks"),
        make_yelp_business("local-grind", "Local Grind"),
        make_yelp_business("dunkin-example", "Dunkin'"),
        make_yelp_business("bean-there", "Bean There"),
        make_yelp_business("moonlight-roasters", "Moonlight Roasters"),
    ]


def _assert_counters_consistent(results):
    assert results.processed + results.skipped == results.total
    for stats in results.per_locality:
        assert stats.processed + stats.skipped == stats.count
    assert results.total == sum(s.count for s in results.per_locality)
    assert results.filtered == sum(s.filtered for s in results.per_locality)


def test_chains_are_filtered_and_target_is_respected(db_session):
    yelp = FakeYelpClient(search_results={"Example City": _example_city()})

    results = _run(db_session, yelp, localities=["Example City"], max_per_locality=2)

    assert results.filtered >= 2
    assert results.processed <= 2
    stored = {b.id for b in db_session.query(Business).all()}
    assert len(stored) <= 2
    assert "starbucks-example" not in stored
    assert "dunkin-example" not in stored
    assert results.errors == []
    _assert_counters_consistent(results)


def test_search_overfetches_twice_the_target(db_session):
    yelp = FakeYelpClient(search_results={"Example City": _example_city()})

    _run(db_session, yelp, localities=["Example City"], max_per_locality=3, min_rating=4.0)

    assert yelp.search_calls == [{"location": "Example City", "max_results": 6, "min_rating": 4.0}]


def test_truncation_counts_as_filtered(db_session):
    candidates = [make_yelp_business(f"shop-{i}", f"Independent Shop {i}") for i in range(5)]
    yelp = FakeYelpClient(search_results={"Harlingen, TX": candidates})

    results = _run(db_session, yelp, localities=["Harlingen, TX"], max_per_locality=3)

    assert results.total == 3
    assert results.processed == 3
    assert results.filtered == 2
    assert db_session.query(Business).count() == 3


def test_chains_kept_when_exclusion_disabled(db_session):
    yelp = FakeYelpClient(search_results={"Example City": _example_city()})

    results = _run(db_session, yelp, localities=["Example City"], max_per_locality=10, exclude_chains=False)

    assert results.filtered == 0
    assert db_session.query(Business).filter(Business.id == "starbucks-example").count() == 1


def test_detail_failure_skips_candidate_and_continues(db_session):
    yelp = FakeYelpClient(
        search_results={"McAllen, TX": [
            make_yelp_business("shop-a", "Shop A"),
            make_yelp_business("shop-b", "Shop B"),
        ]},
        details={"shop-a": UpstreamAPIError(500, "boom")},
    )

    results = _run(db_session, yelp, localities=["McAllen, TX"], max_per_locality=5)

    assert results.skipped == 1
    assert results.processed == 1
    assert len(results.errors) == 1
    assert results.errors[0].startswith("Error fetching details for Shop A")
    assert db_session.query(Business).filter(Business.id == "shop-b").count() == 1
    _assert_counters_consistent(results)


def test_detail_failure_falls_back_to_search_result_when_photos_optional(db_session):
    yelp = FakeYelpClient(
        search_results={"McAllen, TX": [make_yelp_business("shop-a", "Shop A")]},
        details={"shop-a": UpstreamAPIError(500, "boom")},
    )

    results = _run(db_session, yelp, localities=["McAllen, TX"], require_photos=False)

    assert results.processed == 1
    assert results.errors == []


def test_no_detail_fetch_when_photos_not_requested(db_session):
    yelp = FakeYelpClient(search_results={"McAllen, TX": [make_yelp_business("shop-a", "Shop A")]})

    results = _run(db_session, yelp, localities=["McAllen, TX"], fetch_photos=False)

    assert yelp.detail_calls == []
    stored = db_session.query(Business).one()
    assert stored.photos == ["https://img.example.com/shop-a.jpg"]
    assert results.processed == 1


def test_business_without_any_photo_is_skipped(db_session):
    yelp = FakeYelpClient(
        search_results={"Pharr, TX": [make_yelp_business("shop-a", "Shop A")]},
        details={"shop-a": make_yelp_business("shop-a", "Shop A", image_url=None, photos=[])},
    )

    results = _run(db_session, yelp, localities=["Pharr, TX"])

    assert results.skipped == 1
    assert results.processed == 0
    assert db_session.query(Business).count() == 0


def test_detail_photos_are_stored_primary_first(db_session):
    detail = make_yelp_business(
        "shop-a",
        "Shop A",
        photos=["https://img.example.com/inside.jpg", "https://img.example.com/shop-a.jpg"],
    )
    yelp = FakeYelpClient(
        search_results={"Pharr, TX": [make_yelp_business("shop-a", "Shop A")]},
        details={"shop-a": detail},
    )

    _run(db_session, yelp, localities=["Pharr, TX"])

    stored = db_session.query(Business).one()
    assert stored.photos == ["https://img.example.com/shop-a.jpg", "https://img.example.com/inside.jpg"]


def test_locality_failure_does_not_stop_other_localities(db_session):
    yelp = FakeYelpClient(search_results={
        "Brownsville, TX": UpstreamAPIError(503, "unavailable"),
        "Weslaco, TX": [make_yelp_business("shop-w", "Shop W")],
    })

    results = _run(db_session, yelp, localities=["Brownsville, TX", "Weslaco, TX"])

    assert len(results.errors) == 1
    assert results.errors[0].startswith("Error processing Brownsville, TX")
    assert results.processed == 1
    assert [s.locality for s in results.per_locality] == ["Weslaco, TX"]


def test_upsert_failure_is_recorded_and_skipped(db_session):
    yelp = FakeYelpClient(search_results={"Mission, TX": [
        make_yelp_business("shop-a", "Shop A"),
        make_yelp_business("shop-b", "Shop B"),
    ]})

    def flaky_upsert(db, record):
        if record.id == "shop-a":
            raise StorageError("constraint violated")
        return upsert_business(db, record)

    with patch("app.services.ingestion.upsert_business", side_effect=flaky_upsert):
        results = _run(db_session, yelp, localities=["Mission, TX"])

    assert results.errors == ["Error upserting Shop A: constraint violated"]
    assert results.skipped == 1
    assert results.processed == 1
    _assert_counters_consistent(results)


def test_reingestion_is_idempotent(db_session):
    yelp = FakeYelpClient(search_results={"Edinburg, TX": [make_yelp_business("shop-e", "Shop E")]})

    _run(db_session, yelp, localities=["Edinburg, TX"])
    _run(db_session, yelp, localities=["Edinburg, TX"])

    assert db_session.query(Business).count() == 1


def test_default_localities_are_used(db_session):
    yelp = FakeYelpClient()

    with patch("app.services.ingestion.settings.ingest_default_localities", ["San Benito, TX", "Pharr, TX"]):
        results = _run(db_session, yelp)

    assert [c["location"] for c in yelp.search_calls] == ["San Benito, TX", "Pharr, TX"]
    assert results.total == 0


def test_ingest_route_returns_results(client, db_session, fake_yelp):
    fake_yelp.search_results = {"Example City": _example_city()}

    with patch("app.services.ingestion.settings.ingest_locality_delay_seconds", 0):
        response = client.post(
            "/api/v1/yelp/ingest",
            json={"localities": ["Example City"], "max_per_locality": 2},
        )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["success"] is True
    assert data["results"]["filtered"] >= 2
    assert data["results"]["processed"] <= 2
    assert data["results"]["per_locality"][0]["locality"] == "Example City"


def test_ingest_route_rejects_bad_options(client, fake_yelp):
    response = client.post("/api/v1/yelp/ingest", json={"max_per_locality": 0})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["success"] is False


def test_ingest_info(client):
    response = client.get("/api/v1/yelp/ingest")

    assert response.status_code == status.HTTP_200_OK
    assert "Brownsville, TX" in response.json()["localities"]


def test_ingest_route_fatal_error_fails_whole_run(client, fake_yelp):
    server = TestClient(app, raise_server_exceptions=False)

    with patch("app.routers.yelp.run_ingestion", side_effect=RuntimeError("db gone")):
        response = server.post("/api/v1/yelp/ingest", json={"localities": ["Example City"]})

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"success": False, "error": "db gone"}
    assert "results" not in response.json()
