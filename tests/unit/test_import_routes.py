"""
API tests for the import routes.

Run: pytest tests/unit/test_import_routes.py -v
"""

import pytest


CSV_UPLOAD = (
    "Drug Name,Batch No,Exp Date,Cost Price,Remarks\n"
    "Paracetamol 500mg,PCM2301,2026-03-01,1200,fast mover\n"
    "Amoxicillin 250mg,AMX5512,15/08/2026,2000,\n"
).encode()


class TestConfigEndpoint:
    """GET /api/imports/configs/{entity_type}"""

    def test_customer_fields(self, test_client):
        response = test_client.get("/api/imports/configs/customer")

        assert response.status_code == 200
        fields = response.json()["fields"]
        assert fields[0] == {"field": "full_name", "label": "Patient Name", "required": True}
        assert {f["field"] for f in fields if not f["required"]} == {
            "phone", "email", "date_of_birth", "address", "notes",
        }

    def test_unknown_entity_type(self, test_client):
        response = test_client.get("/api/imports/configs/supplier")

        assert response.status_code == 422


class TestMappingEndpoints:
    """Upload mapping and manual overrides."""

    def test_upload_is_auto_mapped(self, test_client):
        response = test_client.post(
            "/api/imports/medication/mapping",
            files={"file": ("stock.csv", CSV_UPLOAD, "text/csv")},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["headers"] == ["Drug Name", "Batch No", "Exp Date", "Cost Price", "Remarks"]
        assert body["mappings"]["Drug Name"]["mapped_to"] == "name"
        assert body["mappings"]["Exp Date"]["mapped_to"] == "expiry_date"
        assert body["mappings"]["Remarks"] is None
        assert body["missing_required_fields"] == []
        assert len(body["rows"]) == 2

    def test_empty_upload_is_rejected(self, test_client):
        response = test_client.post(
            "/api/imports/medication/mapping",
            files={"file": ("stock.csv", b"Drug Name,Qty\n", "text/csv")},
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "IMPORT_FILE_ERROR"

    def test_override(self, test_client):
        response = test_client.post(
            "/api/imports/medication/mapping/override",
            json={
                "mappings": {
                    "Cost": {"mapped_to": "unit_price", "confidence": 0.9},
                    "Remarks": None,
                },
                "header": "Remarks",
                "target_field": "unit_price",
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["Cost"] is None
        assert body["Remarks"] == {"mapped_to": "unit_price", "confidence": 1.0, "is_auto_mapped": False}

    def test_override_unknown_field(self, test_client):
        response = test_client.post(
            "/api/imports/doctor/mapping/override",
            json={"mappings": {"Name": None}, "header": "Name", "target_field": "batch_number"},
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "UNKNOWN_TARGET_FIELD"


class TestPreviewAndExecute:
    """Preview and import."""

    PAYLOAD = {
        "headers": ["Name", "Phone", "Ward"],
        "rows": [
            {"Name": "Ada Obi", "Phone": "0803 123 4567", "Ward": "B"},
            {"Name": "", "Phone": "0901 234 5678", "Ward": ""},
        ],
        "mappings": {
            "Name": {"mapped_to": "full_name", "confidence": 1.0},
            "Phone": {"mapped_to": "phone", "confidence": 0.5},
            "Ward": None,
        },
    }

    def test_preview(self, test_client):
        response = test_client.post("/api/imports/customer/preview", json=self.PAYLOAD)

        assert response.status_code == 200
        body = response.json()
        assert body["total_rows"] == 2
        assert body["rows_with_errors"] == 1
        assert body["rows"][0]["metadata"] == {"Ward": "B"}
        assert body["rows"][0]["warnings"] == ['"Phone" → "phone" (low confidence)']
        assert body["rows"][1]["errors"] == ["Missing required field: Patient Name"]

    def test_execute(self, test_client_with_mock_db, mock_supabase):
        response = test_client_with_mock_db.post(
            "/api/imports/customer/execute",
            json={**self.PAYLOAD, "pharmacy_id": "pharmacy-1"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success_count"] == 1
        assert body["errors"] == [{"row": 3, "message": "Name is required"}]
        assert body["metadata_columns_preserved"] == 1
        assert mock_supabase.inserted("customers")[0]["full_name"] == "Ada Obi"

    def test_execute_requires_pharmacy(self, test_client):
        response = test_client.post("/api/imports/customer/execute", json=self.PAYLOAD)

        assert response.status_code == 422


class TestInferenceEndpoints:
    """Header matching and value classification."""

    def test_match_header(self, test_client):
        response = test_client.post(
            "/api/imports/match-header",
            json={"header": "Batch No", "target_fields": ["name", "batch_number"]},
        )

        assert response.json() == {"field": "batch_number", "confidence": 1.0}

    def test_match_header_without_match(self, test_client):
        response = test_client.post(
            "/api/imports/match-header",
            json={"header": "Colour", "target_fields": ["name"]},
        )

        assert response.status_code == 200
        assert response.json() is None

    @pytest.mark.parametrize("values,detected", [
        (["ada@example.com", "bola@example.com"], "email"),
        (["12", "40"], "numeric"),
        (["Paracetamol 500mg", "Ibuprofen 200mg"], None),
    ])
    def test_detect_type(self, test_client, values, detected):
        response = test_client.post("/api/imports/detect-type", json={"values": values})

        assert response.json() == {"detected_type": detected}


class TestProductLineEndpoints:
    """Product-line parsing."""

    def test_parse_line(self, test_client):
        response = test_client.post(
            "/api/imports/parse-line",
            json={"text": "Amoxicillin 250mg Caps - 50pcs N2000 B/N: ABC123"},
        )

        assert response.json() == {
            "name": "Amoxicillin 250mg Caps",
            "quantity": 50,
            "price": 2000.0,
            "expiry": None,
            "batch_number": "ABC123",
            "category": "Capsule",
            "is_compound": True,
        }

    def test_parse_lines(self, test_client):
        response = test_client.post(
            "/api/imports/parse-lines",
            json={"text": "Paracetamol x100\nVitamin C"},
        )

        body = response.json()
        assert body["compound_count"] == 1
        assert body["plain_count"] == 1

    def test_normalize(self, test_client):
        response = test_client.post(
            "/api/imports/normalize",
            json={"dates": ["15/08/2026", "soon"], "numbers": ["₦1,200", "n/a"]},
        )

        assert response.json() == {"dates": ["2026-08-15", None], "numbers": [1200.0, 0.0]}


class TestAppEndpoints:
    """Root and health endpoints."""

    def test_root(self, test_client):
        response = test_client.get("/")

        assert response.json()["endpoints"] == {"imports": "/api/imports"}

    def test_health(self, test_client):
        response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] in ("healthy", "degraded")
        assert response.json()["engine"]["entities"] == ["medication", "customer", "doctor"]
