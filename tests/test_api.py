"""Tests for the HTTP API."""

import base64
from uuid import uuid4

from fastapi.testclient import TestClient

from saycal.api.app import create_app
from tests.conftest import (
    FakeNutritionClient,
    FakeTranscriptionClient,
    failure_payload,
    transport_error,
)

PROFILE_PAYLOAD = {
    "sex": "male",
    "age": 30,
    "height_cm": 180,
    "weight_kg": 80,
    "activity_level": "moderately_active",
    "goal": "maintain_weight",
}


def _client(container) -> TestClient:  # type: ignore[no-untyped-def]
    return TestClient(create_app(container))


def test_health(container) -> None:
    response = _client(container).get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_calculate_calories_success(container) -> None:
    response = _client(container).post(
        "/calculate-calories", json={"transcribed_meal": "chicken and rice"}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["total_calories"] == 530
    assert body["error"] is None


def test_calculate_calories_domain_failure(
    container, nutrition_client: FakeNutritionClient
) -> None:
    nutrition_client.payload = failure_payload()

    response = _client(container).post(
        "/calculate-calories", json={"transcribed_meal": "asdfghjkl"}
    )

    assert response.status_code == 200
    assert response.json() == failure_payload()


def test_calculate_calories_missing_field(container) -> None:
    response = _client(container).post("/calculate-calories", json={})

    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields", "kind": "validation"}


def test_calculate_calories_transport_error(
    container, nutrition_client: FakeNutritionClient
) -> None:
    nutrition_client.error = transport_error()

    response = _client(container).post(
        "/calculate-calories", json={"transcribed_meal": "toast"}
    )

    assert response.status_code == 503
    assert response.json()["kind"] == "transport"


def test_transcribe_passes_result_through(
    container, transcription_client: FakeTranscriptionClient
) -> None:
    audio = base64.b64encode(b"voice").decode()

    response = _client(container).post(
        "/transcribe", json={"audio": audio, "format": "m4a"}
    )

    assert response.status_code == 200
    assert response.json() == {"text": "two eggs and toast"}
    assert transcription_client.uploads[0][1] == "m4a"


def test_transcribe_bad_audio(
    container, transcription_client: FakeTranscriptionClient
) -> None:
    response = _client(container).post("/transcribe", json={"audio": "!!notbase64"})

    assert response.status_code == 400
    assert response.json()["kind"] == "decode"
    assert transcription_client.uploads == []


def test_log_meal_and_read_back(container) -> None:
    client = _client(container)

    created = client.post("/meals?wait=true", json={"text": "chicken and rice"})

    assert created.status_code == 201
    meal = created.json()
    assert meal["is_loading"] is False
    assert meal["meal_type"] == "Lunch"
    assert meal["nutrition_response"]["success"] is True

    fetched = client.get(f"/meals/{meal['id']}")
    assert fetched.status_code == 200
    assert fetched.json() == meal

    listed = client.get("/meals", params={"day": meal["timestamp"][:10]})
    assert [m["id"] for m in listed.json()["meals"]] == [meal["id"]]


def test_log_meal_failure_is_visible(
    container, nutrition_client: FakeNutritionClient
) -> None:
    nutrition_client.error = transport_error()

    response = _client(container).post("/meals?wait=true", json={"text": "toast"})

    assert response.status_code == 201
    meal = response.json()
    assert meal["is_loading"] is False
    assert meal["nutrition_response"] is None
    assert meal["error"] == {"kind": "transport", "message": "OpenAI returned HTTP 503"}


def test_log_audio_meal(container) -> None:
    audio = base64.b64encode(b"voice").decode()

    response = _client(container).post(
        "/meals/audio?wait=true", json={"audio": audio, "format": "webm"}
    )

    assert response.status_code == 201
    assert response.json()["transcription"] == "two eggs and toast"


def test_delete_meal(container) -> None:
    client = _client(container)
    meal_id = client.post("/meals?wait=true", json={"text": "apple"}).json()["id"]

    deleted = client.delete(f"/meals/{meal_id}")
    missing = client.get(f"/meals/{meal_id}")

    assert deleted.status_code == 204
    assert missing.status_code == 404
    assert missing.json() == {"error": "Meal not found", "kind": "not_found"}
    assert client.delete(f"/meals/{meal_id}").status_code == 404


def test_day_summary_uses_profile_goal(container) -> None:
    client = _client(container)
    user_id = uuid4()
    client.put(f"/profiles/{user_id}", json=PROFILE_PAYLOAD)
    meal = client.post("/meals?wait=true", json={"text": "chicken"}).json()
    day = meal["timestamp"][:10]

    response = client.get(f"/days/{day}/summary", params={"user_id": str(user_id)})

    assert response.status_code == 200
    body = response.json()
    assert body["total_calories"] == 530
    assert body["goal_calories"] == 2759
    assert body["remaining_calories"] == 2229
    assert body["is_over_target"] is False
    assert body["groups"] == {"Lunch": [meal["id"]]}


def test_day_summary_rejects_unknown_timezone(container) -> None:
    response = _client(container).get(
        "/days/2024-05-01/summary", params={"timezone": "Mars/Olympus"}
    )

    assert response.status_code == 400
    assert response.json()["kind"] == "validation"


def test_profile_targets(container) -> None:
    response = _client(container).post("/profiles/targets", json=PROFILE_PAYLOAD)

    assert response.status_code == 200
    body = response.json()
    assert body["target_calories"] == 2759
    assert body["carbs_percent"] + body["fats_percent"] + body["protein_percent"] == 100


def test_save_and_get_profile(container) -> None:
    client = _client(container)
    user_id = uuid4()
    payload = {**PROFILE_PAYLOAD, "units_preference": "imperial"}

    saved = client.put(f"/profiles/{user_id}", json=payload)
    fetched = client.get(f"/profiles/{user_id}")

    assert saved.status_code == 200
    assert fetched.json() == saved.json()
    body = saved.json()
    assert body["display_height"] == "5'11\""
    assert body["display_weight"] == "176 lbs"
    assert body["onboarding_completed"] is True


def test_save_profile_rejects_partial_macro_split(container) -> None:
    payload = {**PROFILE_PAYLOAD, "carbs_percent": 50}

    response = _client(container).put(f"/profiles/{uuid4()}", json=payload)

    assert response.status_code == 400
    assert response.json()["kind"] == "profile_validation"


def test_get_missing_profile(container) -> None:
    response = _client(container).get(f"/profiles/{uuid4()}")

    assert response.status_code == 404
    assert response.json()["kind"] == "not_found"


def test_reset_meal_log(container) -> None:
    client = _client(container)
    meal_id = client.post("/meals?wait=true", json={"text": "apple"}).json()["id"]

    response = client.delete("/meals")

    assert response.status_code == 204
    assert client.get(f"/meals/{meal_id}").status_code == 404
