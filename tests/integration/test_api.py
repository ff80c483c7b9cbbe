"""Integration tests for API endpoints"""

from fastapi.testclient import TestClient

from payment_tracker.domain.exceptions import BackendRejectedError


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    client.post("/v1/payments", json={
        "client_id": "c1",
        "expected_date": "2024-03-15",
        "actual_date": "2024-03-15",
        "amount": "500.00",
    })
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "payment_tracker_payments_total" in response.text


def test_request_id_header(client: TestClient):
    """Test request ID is echoed back or generated"""
    response = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"
    assert client.get("/health").headers["X-Request-ID"]


def test_classify_endpoint(client: TestClient):
    """Test POST /v1/status/classify"""
    response = client.post("/v1/status/classify", json={"expected_date": "2024-03-01", "actual_date": "2024-03-05"})

    assert response.status_code == 200
    assert response.json() == {"status": "late", "days": 4}


def test_classify_endpoint_invalid_date(client: TestClient):
    response = client.post("/v1/status/classify", json={"expected_date": "2024-02-30", "actual_date": "2024-03-05"})
    assert response.status_code == 422


def test_next_due_endpoint_uses_injected_today(client: TestClient):
    """Test GET /v1/schedule/next-due defaults to the injected reference date"""
    response = client.get("/v1/schedule/next-due", params={"payment_day": 15})

    assert response.status_code == 200
    assert response.json() == {
        "payment_day": 15,
        "reference_date": "2024-03-10",
        "next_due_date": "2024-03-15",
        "days_until": 5,
    }


def test_next_due_endpoint_explicit_reference(client: TestClient):
    response = client.get("/v1/schedule/next-due", params={"payment_day": 31, "reference_date": "2024-04-01"})

    assert response.status_code == 200
    assert response.json()["next_due_date"] == "2024-04-30"


def test_next_due_endpoint_invalid_day(client: TestClient):
    """Test out-of-range payment day is rejected"""
    response = client.get("/v1/schedule/next-due", params={"payment_day": 32})

    assert response.status_code == 422
    assert "between 1 and 31" in response.json()["detail"]


def test_list_clients(client: TestClient):
    """Test GET /v1/clients with derived fields"""
    response = client.get("/v1/clients")

    assert response.status_code == 200
    data = response.json()
    assert data["pagination"]["total_items"] == 3
    first = data["clients"][0]
    assert first["id"] == "c1"
    assert first["next_due_date"] == "2024-03-15"
    assert first["payment_count"] == 2
    assert float(first["monthly_amount"]) == 500.0


def test_list_clients_search_and_pagination(client: TestClient):
    response = client.get("/v1/clients", params={"search": "pérez"})
    assert [c["id"] for c in response.json()["clients"]] == ["c2"]

    response = client.get("/v1/clients", params={"page": 2, "per_page": 2})
    data = response.json()
    assert [c["id"] for c in data["clients"]] == ["c3"]
    assert data["pagination"]["total_pages"] == 2
    assert data["pagination"]["first_index"] == 3


def test_upcoming_endpoint(client: TestClient):
    """Test GET /v1/clients/upcoming"""
    response = client.get("/v1/clients/upcoming", params={"horizon_days": 21})

    assert response.status_code == 200
    data = response.json()
    assert [(u["client_id"], u["days_until"]) for u in data] == [("c1", 5), ("c2", 21)]


def test_create_client_default_percentage(client: TestClient, fake_backend):
    """Test POST /v1/clients without a rate leaves the default to the backend client"""
    response = client.post("/v1/clients", json={
        "name": "Luis Ramírez",
        "principal_amount": "2000.00",
        "payment_day": 20,
    })

    assert response.status_code == 201
    assert response.json()["next_due_date"] == "2024-03-20"
    assert "monthly_percentage" not in fake_backend.written[-1]


def test_create_client_validation(client: TestClient):
    """Test principal and payment day are validated"""
    response = client.post("/v1/clients", json={"name": "X", "principal_amount": "0", "payment_day": 10})
    assert response.status_code == 422

    response = client.post("/v1/clients", json={"name": "X", "principal_amount": "10", "payment_day": 32})
    assert response.status_code == 422


def test_update_client(client: TestClient):
    response = client.patch("/v1/clients/c1", json={"payment_day": 1})

    assert response.status_code == 200
    assert response.json()["next_due_date"] == "2024-04-01"


def test_update_client_not_found(client: TestClient):
    response = client.patch("/v1/clients/missing", json={"name": "Nadie"})
    assert response.status_code == 404


def test_delete_client_removes_payments(client: TestClient, fake_backend):
    """Test DELETE /v1/clients/{id} deactivates the client and drops its payments"""
    response = client.delete("/v1/clients/c1")

    assert response.status_code == 204
    assert all(p.client_id != "c1" for p in fake_backend.payments)
    assert [c["id"] for c in client.get("/v1/clients").json()["clients"]] == ["c2", "c3"]


def test_list_payments_with_status(client: TestClient):
    """Test GET /v1/payments returns computed status per payment"""
    response = client.get("/v1/payments")

    assert response.status_code == 200
    data = response.json()
    assert data["pagination"]["total_items"] == 4
    by_id = {p["id"]: p["status"] for p in data["payments"]}
    assert by_id["p2"] == {"status": "late", "days": 6}
    assert by_id["p3"] == {"status": "early", "days": 3}
    assert by_id["p1"] == {"status": "on_time", "days": 0}


def test_list_payments_filters(client: TestClient):
    response = client.get("/v1/payments", params={"status": "on_time", "client_id": "c1"})
    assert [p["id"] for p in response.json()["payments"]] == ["p1"]

    response = client.get("/v1/payments", params={"status": "overdue"})
    assert response.status_code == 422


def test_create_payment(client: TestClient):
    """Test POST /v1/payments records a payment with its status"""
    response = client.post("/v1/payments", json={
        "client_id": "c2",
        "expected_date": "2024-03-31",
        "actual_date": "2024-04-02",
        "amount": "300.00",
        "notes": "Late transfer",
    })

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == {"status": "late", "days": 2}
    assert data["client_name"] == "Carlos Pérez"


def test_create_payment_validation(client: TestClient):
    response = client.post("/v1/payments", json={
        "client_id": "c2",
        "expected_date": "2024-03-31",
        "actual_date": "not-a-date",
        "amount": "300.00",
    })
    assert response.status_code == 422


def test_update_payment_recomputes_status(client: TestClient):
    response = client.put("/v1/payments/p2", json={
        "client_id": "c1",
        "expected_date": "2024-02-15",
        "actual_date": "2024-02-14",
        "amount": "500.00",
    })

    assert response.status_code == 200
    assert response.json()["status"] == {"status": "early", "days": 1}


def test_delete_payment(client: TestClient):
    assert client.delete("/v1/payments/p1").status_code == 204
    assert client.delete("/v1/payments/p1").status_code == 404


def test_dashboard(client: TestClient):
    """Test GET /v1/dashboard aggregates"""
    response = client.get("/v1/dashboard")

    assert response.status_code == 200
    data = response.json()
    assert data["reference_date"] == "2024-03-10"
    assert data["currency"] == "Q"
    assert data["portfolio"]["client_count"] == 3
    assert data["stats"]["late_count"] == 1
    assert data["stats"]["average_late_days"] == 6.0
    assert data["stats"]["on_time_rate"] == 50.0
    assert float(data["stats"]["month_total"]) == 125.0
    assert [m["label"] for m in data["monthly_totals"]] == ["2024-01", "2024-02", "2024-03"]
    assert data["top_clients"][0]["label"] == "Ana López"
    assert data["recent_payments"][0]["id"] == "p4"
    assert [u["client_id"] for u in data["upcoming_payments"]] == ["c1", "c2", "c3"]


def test_backend_unavailable(client: TestClient, fake_backend):
    """Test backend failures surface as 503"""
    fake_backend.fail = True

    assert client.get("/v1/clients").status_code == 503
    assert client.get("/v1/payments").status_code == 503
    assert client.get("/v1/dashboard").status_code == 503


def test_update_client_rejects_explicit_null(client: TestClient, fake_backend):
    """Test null on a required column is refused instead of reaching the backend"""
    for field in ("payment_day", "name", "principal_amount", "monthly_percentage"):
        response = client.patch("/v1/clients/c1", json={field: None})
        assert response.status_code == 422, field

    assert fake_backend.clients[0].payment_day == 15


def test_update_client_null_email_clears_it(client: TestClient):
    response = client.patch("/v1/clients/c1", json={"email": None})

    assert response.status_code == 200
    assert response.json()["email"] is None


def test_create_client_contact_validation(client: TestClient):
    """Test email format and Guatemalan phone numbers"""
    base = {"name": "Luis Ramírez", "principal_amount": "2000.00", "payment_day": 20}

    assert client.post("/v1/clients", json={**base, "email": "not-an-email"}).status_code == 422
    assert client.post("/v1/clients", json={**base, "phone": "12345678"}).status_code == 422
    assert client.post("/v1/clients", json={**base, "phone": "+1 555 123 4567"}).status_code == 422

    response = client.post("/v1/clients", json={**base, "email": "luis@example.com", "phone": "+502 5555-1234"})
    assert response.status_code == 201
    assert response.json()["phone"] == "+50255551234"
    assert response.json()["email"] == "luis@example.com"


def test_list_clients_sorting(client: TestClient):
    response = client.get("/v1/clients", params={"sort": "principal_amount", "order": "asc"})
    assert [c["id"] for c in response.json()["clients"]] == ["c3", "c2", "c1"]

    response = client.get("/v1/clients", params={"sort": "payment_count", "order": "desc"})
    assert [c["id"] for c in response.json()["clients"]] == ["c1", "c2", "c3"]

    assert client.get("/v1/clients", params={"sort": "password"}).status_code == 422
    assert client.get("/v1/clients", params={"order": "sideways"}).status_code == 422


def test_list_payments_sorting(client: TestClient):
    """Test sorting by amount and client name; ties keep most recent first"""
    response = client.get("/v1/payments", params={"sort": "amount", "order": "asc"})
    assert [p["id"] for p in response.json()["payments"]] == ["p4", "p3", "p2", "p1"]

    response = client.get("/v1/payments", params={"sort": "client_name", "order": "asc"})
    assert [p["id"] for p in response.json()["payments"]] == ["p2", "p1", "p3", "p4"]

    assert client.get("/v1/payments", params={"sort": "status"}).status_code == 422


def test_list_payments_status_all(client: TestClient):
    response = client.get("/v1/payments", params={"status": "all"})

    assert response.status_code == 200
    assert response.json()["pagination"]["total_items"] == 4


def test_backend_conflict_passes_message(client: TestClient, fake_backend):
    """Test a rejected write is reported to the caller, not as an outage"""
    fake_backend.reject = BackendRejectedError("violates foreign key constraint", 409)

    response = client.post("/v1/payments", json={
        "client_id": "c9",
        "expected_date": "2024-03-15",
        "actual_date": "2024-03-15",
        "amount": "500.00",
    })

    assert response.status_code == 409
    assert "foreign key" in response.json()["detail"]


def test_backend_bad_request_becomes_422(client: TestClient, fake_backend):
    fake_backend.reject = BackendRejectedError("violates check constraint", 400)

    response = client.patch("/v1/clients/c1", json={"name": "Ana"})

    assert response.status_code == 422
    assert "check constraint" in response.json()["detail"]
