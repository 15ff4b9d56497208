from __future__ import annotations

from flask.testing import FlaskClient

from compound_calc.app import create_app
from compound_calc.config import Settings
from compound_calc.domain.errors import StorageError
from compound_calc.domain.storage import InMemoryStorage

from conftest import calculation_payload


class ReadOnlyStorage(InMemoryStorage):
    def set_item(self, key: str, value: str) -> None:
        raise StorageError("storage is full")


def test_calculation_returns_result_and_saves(client: FlaskClient):
    resp = client.post("/api/calc/compound", json=calculation_payload())

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["saved"] is True
    assert body["warnings"] == []
    result = body["result"]
    assert len(result["yearlyBreakdown"]) == 3
    assert abs(result["finalAmount"] - 11576.25) < 1e-9
    assert result["formula"] == "A = P(1 + r/n)^(nt)"
    assert all("date" not in row for row in result["yearlyBreakdown"])
    assert body["summary"]["finalAmount"] == "₱11,576.25"
    assert body["summary"]["rows"][2]["totalInterestToDate"] == "₱1,576.25"

    history = client.get("/api/history").get_json()
    assert [entry["id"] for entry in history] == [body["record"]["id"]]


def test_calculation_with_start_date_dates_each_row(client: FlaskClient):
    resp = client.post("/api/calc/compound", json=calculation_payload(startDate="2024-01-15", time=2))

    rows = resp.get_json()["result"]["yearlyBreakdown"]
    assert [row["date"] for row in rows] == ["2025-01-15", "2026-01-15"]


def test_save_false_skips_history(client: FlaskClient):
    resp = client.post("/api/calc/compound", json=calculation_payload(save=False))

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["saved"] is False
    assert "record" not in body
    assert client.get("/api/history").get_json() == []


def test_invalid_input_is_reported_per_field(client: FlaskClient):
    resp = client.post("/api/calc/compound", json=calculation_payload(principal=0, time=1.5))

    assert resp.status_code == 422
    detail = resp.get_json()["detail"]
    assert sorted(item["field"] for item in detail) == ["principal", "time"]
    assert client.get("/api/history").get_json() == []


def test_overflow_is_unprocessable(client: FlaskClient):
    payload = calculation_payload(principal=1e12, rate=1e6, time=100, frequency="continuously")

    resp = client.post("/api/calc/compound", json=payload)

    assert resp.status_code == 422
    assert resp.get_json()["detail"][0]["field"] == "__root__"


def test_failed_save_still_returns_result():
    app = create_app(storage=ReadOnlyStorage(), settings=Settings(storage_backend="memory"))
    with app.test_client() as client:
        resp = client.post("/api/calc/compound", json=calculation_payload())

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["saved"] is False
    assert body["warnings"] and "not saved" in body["warnings"][0]
    assert body["result"]["totalInterest"] > 0


def test_history_record_lookup_and_recalculate(client: FlaskClient):
    record_id = client.post("/api/calc/compound", json=calculation_payload()).get_json()["record"]["id"]

    record = client.get(f"/api/history/{record_id}").get_json()
    assert record["principal"] == 10000
    assert record["frequency"] == "annually"

    resp = client.post(f"/api/history/{record_id}/recalculate")
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["params"]["time"] == 3
    assert body["result"]["finalAmount"] == record["finalAmount"]
    assert len(client.get("/api/history").get_json()) == 1


def test_unknown_record_is_404(client: FlaskClient):
    assert client.get("/api/history/missing").status_code == 404
    assert client.post("/api/history/missing/recalculate").status_code == 404


def test_delete_and_clear_history(client: FlaskClient):
    ids = [
        client.post("/api/calc/compound", json=calculation_payload(time=t)).get_json()["record"]["id"]
        for t in (1, 2, 3)
    ]

    assert client.delete(f"/api/history/{ids[1]}").status_code == 204
    assert client.delete("/api/history/unknown").status_code == 204
    assert [entry["id"] for entry in client.get("/api/history").get_json()] == [ids[2], ids[0]]

    assert client.delete("/api/history").status_code == 204
    assert client.get("/api/history").get_json() == []


def test_clear_fails_loudly_when_storage_is_read_only():
    app = create_app(storage=ReadOnlyStorage(), settings=Settings(storage_backend="memory"))
    with app.test_client() as client:
        resp = client.delete("/api/history")

    assert resp.status_code == 503


def test_last_params_default_then_remembered(client: FlaskClient):
    defaults = client.get("/api/params/last").get_json()
    assert defaults == {"principal": 10000.0, "rate": 5.0, "time": 10, "frequency": "annually"}

    client.post("/api/calc/compound", json=calculation_payload(frequency="monthly", save=False))
    assert client.get("/api/params/last").get_json()["frequency"] == "monthly"

    resp = client.put("/api/params/last", json=calculation_payload(time=7, startDate="2030-06-01"))
    assert resp.status_code == 200
    remembered = client.get("/api/params/last").get_json()
    assert remembered["time"] == 7
    assert remembered["startDate"] == "2030-06-01"


def test_last_params_rejects_invalid(client: FlaskClient):
    resp = client.put("/api/params/last", json=calculation_payload(rate=0))

    assert resp.status_code == 422
    assert resp.get_json()["detail"][0]["field"] == "rate"


def test_save_flag_must_be_a_json_boolean(client: FlaskClient):
    for flag in ("false", "0", 0):
        resp = client.post("/api/calc/compound", json=calculation_payload(save=flag))

        assert resp.status_code == 422
        assert resp.get_json()["detail"] == [{"field": "save", "message": "save must be true or false"}]
    assert client.get("/api/history").get_json() == []


def test_bad_save_flag_and_bad_params_reported_together(client: FlaskClient):
    resp = client.post("/api/calc/compound", json=calculation_payload(save="yes", rate=0))

    assert resp.status_code == 422
    assert sorted(item["field"] for item in resp.get_json()["detail"]) == ["rate", "save"]
