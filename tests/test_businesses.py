from unittest.mock import patch

from fastapi import status

from app.models.business import Business
from app.seed.seed_data import SEED_BUSINESS_1, SEED_BUSINESS_2


def test_list_businesses(seeded_client):
    response = seeded_client.get("/api/v1/businesses")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["success"] is True
    # Highest rated first
    assert [b["id"] for b in data["businesses"]] == [SEED_BUSINESS_1, SEED_BUSINESS_2]


def test_list_businesses_by_city(seeded_client):
    response = seeded_client.get("/api/v1/businesses?city=Brownsville")

    assert [b["id"] for b in response.json()["businesses"]] == [SEED_BUSINESS_2]


def test_list_businesses_by_min_rating_and_price(seeded_client):
    by_rating = seeded_client.get("/api/v1/businesses?rating=4.5").json()["businesses"]
    by_price = seeded_client.get("/api/v1/businesses", params={"price": "$"}).json()["businesses"]

    assert [b["id"] for b in by_rating] == [SEED_BUSINESS_1]
    assert [b["id"] for b in by_price] == [SEED_BUSINESS_2]


def test_list_businesses_by_category(seeded_client):
    response = seeded_client.get("/api/v1/businesses", params={"category": "Bakeries"})

    assert [b["id"] for b in response.json()["businesses"]] == [SEED_BUSINESS_1]


def test_list_businesses_rejects_bad_rating(seeded_client):
    response = seeded_client.get("/api/v1/businesses?rating=9")

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["success"] is False


def test_get_business_detail(seeded_client):
    response = seeded_client.get(f"/api/v1/businesses/{SEED_BUSINESS_1}")

    assert response.status_code == status.HTTP_200_OK
    business = response.json()["business"]
    assert business["name"] == "Café Dos Mundos"
    assert business["photos"][0] == "https://s3-media.fl.yelpcdn.com/bphoto/dos-mundos/o.jpg"
    assert business["address"] == "1200 N Main St, McAllen, TX 78501"
    assert business["phone"] == "(956) 555-0101"


def test_get_business_detail_without_photos_uses_image(seeded_client):
    response = seeded_client.get(f"/api/v1/businesses/{SEED_BUSINESS_2}")

    assert response.json()["business"]["photos"] == ["https://s3-media.fl.yelpcdn.com/bphoto/stellas/o.jpg"]


def test_get_business_not_found(client):
    response = client.get("/api/v1/businesses/does-not-exist")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"success": False, "error": "Business not found"}


def test_generate_ai_summary(seeded_client, seeded_db):
    with patch(
        "app.services.ai_summary_service.generate_text_with_system",
        return_value="  Warm downtown café known for cortados and pan dulce.  ",
    ) as mock_generate:
        response = seeded_client.post(f"/api/v1/businesses/{SEED_BUSINESS_1}/ai-summary")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["ai_summary"] == "Warm downtown café known for cortados and pan dulce."
    prompt = mock_generate.call_args[0][0]
    assert "Name: Café Dos Mundos" in prompt
    assert "Great cortado" in prompt
    stored = seeded_db.query(Business).filter(Business.id == SEED_BUSINESS_1).one()
    assert stored.ai_summary == "Warm downtown café known for cortados and pan dulce."


def test_generate_ai_summary_unavailable(seeded_client, seeded_db):
    with patch("app.services.ai_summary_service.generate_text_with_system", return_value=None):
        response = seeded_client.post(f"/api/v1/businesses/{SEED_BUSINESS_1}/ai-summary")

    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    assert response.json()["success"] is False
    stored = seeded_db.query(Business).filter(Business.id == SEED_BUSINESS_1).one()
    assert stored.ai_summary is None


def test_generate_ai_summary_without_api_key(seeded_client):
    with patch("app.services.gemini_client.settings.gemini_api_key", None):
        response = seeded_client.post(f"/api/v1/businesses/{SEED_BUSINESS_1}/ai-summary")

    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
