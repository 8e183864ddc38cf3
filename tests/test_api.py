"""Tests for the survey API, analytics routes and the spreadsheet export."""

from winesurvey.extensions import db
from winesurvey.models import SurveyResponse

PAYLOAD = {
    "ageRange": "36 – 45 anos",
    "gender": "Feminino",
    "maritalStatus": "Casado(a)/em união estável",
    "householdSize": "3",
    "cep": "01310-100",
    "frequency": "Uma vez por semana",
    "wineStyle": ["Seco"],
    "wineType": ["Tinto", "Espumante"],
    "classification": "Vinhos finos",
    "priceRange": "R$ 101 – R$ 200",
    "alcoholFreeWine": "Não",
    "grapeVarieties": "",
    "tryNewVarieties": "Sim",
    "preferredOrigins": ["Chile", "Argentina"],
    "purchaseChannels": ["Supermercados"],
    "attractiveFactors": ["Menor preço"],
    "wineEvents": "Sim",
    "cannedWines": "Conheço e gosto",
    "naturalWines": "Não conheço, mas quero conhecer",
    "name": "Ana",
    "email": "ana@example.com",
    "phone": "",
    "communicationPreference": "Sim, prefiro por e-mail",
}


def test_health(client):
    assert client.get("/api/v1/health").get_json() == {"status": "ok"}


def test_submit_persists_response(client):
    resp = client.post("/api/survey", json=PAYLOAD, headers={"User-Agent": "pytest",
                                                            "X-Forwarded-For": "203.0.113.5, 10.0.0.1"})
    body = resp.get_json()

    assert resp.status_code == 200
    assert body["success"] is True
    assert body["message"] == "Pesquisa enviada com sucesso!"

    saved = db.session.get(SurveyResponse, body["surveyId"])
    assert saved is not None
    assert saved.wine_type == ["Tinto", "Espumante"]
    assert saved.ip_address == "203.0.113.5"
    assert saved.user_agent == "pytest"
    assert saved.completed_at is not None


def test_blank_strings_become_null_and_missing_lists_empty(client):
    payload = dict(PAYLOAD)
    del payload["purchaseChannels"]
    body = client.post("/api/survey", json=payload).get_json()

    saved = db.session.get(SurveyResponse, body["surveyId"])
    assert saved.grape_varieties is None
    assert saved.phone is None
    assert saved.purchase_channels == []


def test_single_string_for_multiple_choice_is_wrapped(client):
    body = client.post("/api/survey", json=dict(PAYLOAD, wineType="Tinto")).get_json()
    assert db.session.get(SurveyResponse, body["surveyId"]).wine_type == ["Tinto"]


def test_record_wraps_a_stored_string(add_response):
    """A list column holding a bare string reads back as a one-item list."""
    response = add_response(wine_type="Tinto", preferred_origins="Chile")
    record = response.to_record()
    assert record["wine_type"] == ["Tinto"]
    assert record["preferred_origins"] == ["Chile"]


def test_real_ip_header_used_without_forwarded_for(client):
    body = client.post("/api/survey", json=PAYLOAD, headers={"X-Real-IP": "198.51.100.7"}).get_json()
    assert db.session.get(SurveyResponse, body["surveyId"]).ip_address == "198.51.100.7"


def test_wrong_types_are_rejected(client):
    assert client.post("/api/survey", json=dict(PAYLOAD, wineType=[1, 2])).status_code == 400
    assert client.post("/api/survey", json=dict(PAYLOAD, gender={"x": 1})).status_code == 400
    assert client.post("/api/survey", json=["not", "an", "object"]).status_code == 400
    assert SurveyResponse.query.count() == 0


def test_list_returns_wine_type_stats(client):
    client.post("/api/survey", json=PAYLOAD)
    client.post("/api/survey", json=dict(PAYLOAD, wineType=["Tinto"]))

    body = client.get("/api/survey").get_json()
    assert len(body["surveys"]) == 2
    assert body["analytics"]["total"] == 2
    assert body["analytics"]["wineTypeStats"] == [
        {"type": "Tinto", "count": 2},
        {"type": "Espumante", "count": 1},
    ]


def test_list_is_capped(app, client):
    """The page is capped but the analytics still cover every response."""
    app.config["SURVEY_LIST_LIMIT"] = 1
    client.post("/api/survey", json=dict(PAYLOAD, wineType=["Tinto"]))
    client.post("/api/survey", json=dict(PAYLOAD, wineType=["Tinto"]))
    body = client.get("/api/survey").get_json()
    assert len(body["surveys"]) == 1
    assert body["analytics"]["total"] == 2
    assert body["analytics"]["wineTypeStats"] == [{"type": "Tinto", "count": 2}]


def test_questions(client):
    body = client.get("/api/questions").get_json()
    assert body["totalSteps"] == len(body["steps"]) + 2


def test_validate_step(client):
    resp = client.post("/api/survey/validate", json={"step": 1, "data": {"gender": "Feminino"}})
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["isValid"] is False
    assert "CEP" in body["missing"]

    assert client.post("/api/survey/validate", json={"step": 99, "data": {}}).status_code == 400
    assert client.post("/api/survey/validate", json={"data": {}}).status_code == 400


def test_distribution(client, seeded):
    body = client.get("/api/analytics/distribution/gender").get_json()
    assert body["total"] == 5
    assert body["buckets"][0] == {"key": "Masculino", "count": 3, "percentage": 60.0}

    types = client.get("/api/analytics/distribution/wineType").get_json()
    assert types["buckets"][0]["key"] == "Tinto"
    assert types["buckets"][0]["count"] == 4


def test_distribution_unknown_field(client):
    resp = client.get("/api/analytics/distribution/shoeSize")
    assert resp.status_code == 404
    assert "error" in resp.get_json()


def test_segments(client, seeded):
    body = client.get("/api/analytics/segments").get_json()
    by_rule = {s["rule"]: s for s in body["segments"]}
    assert body["total"] == 5
    assert by_rule["premium"]["count"] == 2
    assert by_rule["premium"]["percentage"] == 40.0


def test_stats(client, seeded):
    stats = client.get("/api/stats").get_json()
    assert stats["total_responses"] == 5
    assert stats["with_email"] == 1
    assert stats["with_phone"] == 1
    assert stats["with_cep"] == 4
    assert stats["recent_responses"] == 5


def test_export_without_data_is_404(client):
    assert client.get("/api/export").status_code == 404


def test_export_xlsx(client, seeded):
    resp = client.get("/api/export")
    assert resp.status_code == 200
    assert resp.mimetype == "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    assert resp.data[:2] == b"PK"


def test_unknown_api_route_is_json(client):
    resp = client.get("/api/nothing-here")
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "not found"
