"""Pytest configuration and fixtures."""
import base64
import io

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from web.app import app
from web.dependencies import get_store
from web.services.records import Teacher, TeacherEvaluation
from web.services.repository import InMemoryEvaluationStore


def make_image_bytes(width: int, height: int, fmt: str = "PNG") -> bytes:
    """Encode a solid-color image of the given size."""
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color=(21, 101, 192)).save(buffer, format=fmt)
    return buffer.getvalue()


def make_data_url(data: bytes, subtype: str = "png") -> str:
    return f"data:image/{subtype};base64,{base64.b64encode(data).decode('ascii')}"


def strip_jpeg_app0(data: bytes) -> bytes:
    """Drop the JFIF APP0 segment Pillow writes after the SOI marker."""
    assert data[2:4] == b"\xff\xe0"
    length = int.from_bytes(data[4:6], "big")
    return data[:2] + data[4 + length:]


@pytest.fixture
def store() -> InMemoryEvaluationStore:
    """Fresh record store per test."""
    return InMemoryEvaluationStore()


@pytest.fixture
def client(store: InMemoryEvaluationStore):
    """Create test client bound to the per-test store."""
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def teacher() -> Teacher:
    return Teacher(
        id="t-1",
        dni="12345678",
        apellidos="Pérez Gómez",
        nombres="María Elena",
        curso="matemática",
        condicion_institucional="tiempo completo",
        horas_por_turno={"mañana": 10, "tarde": 6},
        total_horas=16,
    )


@pytest.fixture
def evaluation() -> TeacherEvaluation:
    return TeacherEvaluation(
        id="e-1",
        teacher_id="t-1",
        evaluator_id="u-1",
        evaluator_name="Carlos Ruiz",
        date="2024-03-15",
        time="10:30",
        performance1="IV",
        performance2="III",
        performance3="III",
        performance4="IV",
        performance5="II",
        performance6="III",
        observations="Clase bien estructurada.",
        strengths="Dominio del tema.",
    )


@pytest.fixture
def png_data_url() -> str:
    """A 1200x300 PNG evidence image as a data URL."""
    return make_data_url(make_image_bytes(1200, 300))


@pytest.fixture
def teacher_payload() -> dict:
    return {
        "dni": "12345678",
        "apellidos": "Pérez Gómez",
        "nombres": "María Elena",
        "curso": "matemática",
        "condicion_institucional": "tiempo completo",
        "horas_por_turno": {"mañana": 10, "tarde": 6},
    }


@pytest.fixture
def evaluation_payload() -> dict:
    """Evaluation body without teacher_id; tests add it after creating the teacher."""
    return {
        "evaluator_name": "Carlos Ruiz",
        "date": "2024-03-15",
        "time": "10:30",
        "performance1": "IV",
        "performance2": "III",
        "performance3": "III",
        "performance4": "IV",
        "performance5": "II",
        "performance6": "III",
        "observations": "Clase bien estructurada.",
    }
