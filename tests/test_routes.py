"""Route integration tests."""
import io
import time
from datetime import date
from unittest.mock import patch

import pytest
from docx import Document

from web.app import app
from web.config import Settings
from web.dependencies import get_settings
from web.exceptions import GENERATION_ERROR_PREFIX
from web.services.docx_report import DOCX_MEDIA_TYPE, EvaluationDocumentGenerator


@pytest.fixture
def teacher_id(client, teacher_payload):
    response = client.post("/teachers", json=teacher_payload)
    assert response.status_code == 201
    return response.json()["id"]


@pytest.fixture
def evaluation_id(client, teacher_id, evaluation_payload):
    response = client.post("/evaluations", json={**evaluation_payload, "teacher_id": teacher_id})
    assert response.status_code == 201
    return response.json()["id"]


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


class TestTeacherRoutes:

    def test_create_teacher(self, client, teacher_payload):
        response = client.post("/teachers", json=teacher_payload)

        assert response.status_code == 201
        body = response.json()
        assert body["total_horas"] == 16
        assert body["created_at"]

    def test_duplicate_dni(self, client, teacher_id, teacher_payload):
        response = client.post("/teachers", json=teacher_payload)
        assert response.status_code == 409
        assert "12345678" in response.json()["detail"]

    @pytest.mark.parametrize(
        "field,value",
        [("dni", "12ab"), ("curso", "astronomía"), ("condicion_institucional", "jubilado"),
         ("horas_por_turno", {"mañana": -1})],
    )
    def test_invalid_payload(self, client, teacher_payload, field, value):
        response = client.post("/teachers", json={**teacher_payload, field: value})
        assert response.status_code == 422

    def test_get_missing_teacher(self, client):
        response = client.get("/teachers/missing")
        assert response.status_code == 404
        assert response.json()["detail"] == "Teacher 'missing' not found"

    def test_replace_teacher(self, client, teacher_id, teacher_payload):
        response = client.put(f"/teachers/{teacher_id}", json={**teacher_payload, "horas_por_turno": {"noche": 3}})
        assert response.status_code == 200
        assert response.json()["total_horas"] == 3

    def test_list_and_delete(self, client, teacher_id):
        assert [t["id"] for t in client.get("/teachers").json()] == [teacher_id]

        assert client.delete(f"/teachers/{teacher_id}").status_code == 204
        assert client.get(f"/teachers/{teacher_id}").status_code == 404

    def test_import(self, client, teacher_id, teacher_payload):
        response = client.post("/teachers/import", json={"teachers": [
            teacher_payload,
            {**teacher_payload, "dni": "87654321"},
        ]})

        assert response.status_code == 200
        assert response.json() == {"imported": 1, "skipped": 1}

    def test_teacher_evaluations(self, client, teacher_id, evaluation_id):
        response = client.get(f"/teachers/{teacher_id}/evaluations")
        assert [e["id"] for e in response.json()] == [evaluation_id]

    def test_evaluations_of_missing_teacher(self, client):
        assert client.get("/teachers/missing/evaluations").status_code == 404


class TestEvaluationRoutes:

    def test_create_evaluation(self, client, teacher_id, evaluation_payload, png_data_url):
        payload = {**evaluation_payload, "teacher_id": teacher_id, "evidence_image_base64": png_data_url}
        response = client.post("/evaluations", json=payload)

        assert response.status_code == 201
        body = response.json()
        assert body["has_evidence_image"] is True
        assert "evidence_image_base64" not in body
        assert body["summary"]["label"] == "III - Satisfactorio"

    def test_unknown_teacher(self, client, evaluation_payload):
        response = client.post("/evaluations", json={**evaluation_payload, "teacher_id": "missing"})
        assert response.status_code == 404

    def test_invalid_rating(self, client, teacher_id, evaluation_payload):
        payload = {**evaluation_payload, "teacher_id": teacher_id, "performance3": "V"}
        assert client.post("/evaluations", json=payload).status_code == 422

    @pytest.mark.parametrize("method", ["post", "put"])
    def test_oversized_evidence(self, client, teacher_id, evaluation_id, evaluation_payload, method):
        app.dependency_overrides[get_settings] = lambda: Settings(MAX_EVIDENCE_SIZE_MB=1)
        payload = {
            **evaluation_payload,
            "teacher_id": teacher_id,
            "evidence_image_base64": "data:image/png;base64," + "A" * (2 * 1024 * 1024),
        }
        url = "/evaluations" if method == "post" else f"/evaluations/{evaluation_id}"

        response = client.request(method.upper(), url, json=payload)

        assert response.status_code == 413
        assert client.get(f"/evaluations/{evaluation_id}").json()["has_evidence_image"] is False

    def test_replace_evaluation(self, client, teacher_id, evaluation_id, evaluation_payload):
        payload = {**evaluation_payload, "teacher_id": teacher_id}
        payload.update({f"performance{i}": "IV" for i in range(1, 7)})

        response = client.put(f"/evaluations/{evaluation_id}", json=payload)

        assert response.status_code == 200
        assert response.json()["summary"] == {
            "average": 4.0, "level": "IV", "band": "Destacado", "label": "IV - Destacado",
        }

    def test_summary(self, client, evaluation_id):
        response = client.get(f"/evaluations/{evaluation_id}/summary")
        assert response.status_code == 200
        assert response.json()["level"] == "III"

    def test_delete(self, client, evaluation_id):
        assert client.delete(f"/evaluations/{evaluation_id}").status_code == 204
        assert client.get(f"/evaluations/{evaluation_id}").status_code == 404
        assert client.delete(f"/evaluations/{evaluation_id}").status_code == 404


class TestDocumentRoutes:

    def test_download_document(self, client, evaluation_id):
        response = client.get(f"/evaluations/{evaluation_id}/document")

        assert response.status_code == 200
        assert response.headers["content-type"] == DOCX_MEDIA_TYPE
        disposition = response.headers["content-disposition"]
        assert 'filename="Evaluacion_Perez_Gomez_Maria_Elena_20240315.docx"' in disposition
        assert "filename*=UTF-8''Evaluacion_P%C3%A9rez_G%C3%B3mez_Mar%C3%ADa_Elena_20240315.docx" in disposition
        assert len(Document(io.BytesIO(response.content)).tables) == 2

    def test_download_missing_evaluation(self, client):
        assert client.get("/evaluations/missing/document").status_code == 404

    def test_undecodable_evidence(self, client, teacher_id, evaluation_payload):
        payload = {**evaluation_payload, "teacher_id": teacher_id, "evidence_image_base64": "data:image/png;base64,???"}
        evaluation_id = client.post("/evaluations", json=payload).json()["id"]

        response = client.get(f"/evaluations/{evaluation_id}/document")

        assert response.status_code == 500
        assert response.json()["detail"].startswith(GENERATION_ERROR_PREFIX)

    def test_generation_timeout(self, client, evaluation_id):
        app.dependency_overrides[get_settings] = lambda: Settings(GENERATION_TIMEOUT_SECONDS=0.05)

        def slow_export(self, teacher, evaluation):
            time.sleep(0.5)

        with patch.object(EvaluationDocumentGenerator, "export_report", slow_export):
            response = client.get(f"/evaluations/{evaluation_id}/document")

        assert response.status_code == 504
        assert response.json()["detail"].startswith(GENERATION_ERROR_PREFIX)

    def test_batch_report(self, client, teacher_id, evaluation_id, evaluation_payload):
        second = client.post("/evaluations", json={**evaluation_payload, "teacher_id": teacher_id}).json()["id"]

        response = client.post("/evaluations/report", json={"evaluation_ids": [evaluation_id, second]})

        assert response.status_code == 200
        assert f"Reporte_Evaluaciones_{date.today():%Y%m%d}.docx" in response.headers["content-disposition"]
        assert len(Document(io.BytesIO(response.content)).tables) == 2

    def test_batch_report_unknown_id(self, client, evaluation_id):
        response = client.post("/evaluations/report", json={"evaluation_ids": [evaluation_id, "missing"]})
        assert response.status_code == 404

    def test_batch_report_requires_ids(self, client):
        assert client.post("/evaluations/report", json={"evaluation_ids": []}).status_code == 422
