"""Teacher and evaluation records exchanged with the record store."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple


class PerformanceLevel(str, Enum):
    """Ordinal rating assigned to each performance slot."""
    I = "I"
    II = "II"
    III = "III"
    IV = "IV"


COURSES = (
    "biología",
    "cívica",
    "filosofía",
    "física",
    "geografía",
    "historia",
    "ingles",
    "lenguaje",
    "literatura",
    "matemática",
    "psicología",
    "química",
    "razonamiento lógico",
    "razonamiento matemático",
    "razonamiento verbal",
)

WORK_CONDITIONS = (
    "tiempo completo",
    "tiempo parcial",
    "no trabaja en otra institución",
)

PERFORMANCE_KEYS = (
    "performance1",
    "performance2",
    "performance3",
    "performance4",
    "performance5",
    "performance6",
)


def calculate_total_hours(horas_por_turno: Dict[str, int]) -> int:
    """Sum the hours assigned to every shift."""
    return sum(horas_por_turno.values())


@dataclass
class Teacher:
    """A teacher record."""
    dni: str
    apellidos: str
    nombres: str
    curso: str
    condicion_institucional: str
    telefono: str = ""
    correo_personal: str = ""
    correo_institucional: str = ""
    horas_por_turno: Dict[str, int] = field(default_factory=dict)
    total_horas: int = 0
    id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.apellidos}, {self.nombres}"


@dataclass
class TeacherEvaluation:
    """One classroom monitoring evaluation of a teacher.

    The six performance fields are always present; values outside I..IV are
    kept as-is and score zero.
    """
    teacher_id: str
    evaluator_id: str
    evaluator_name: str
    date: str
    performance1: str
    performance2: str
    performance3: str
    performance4: str
    performance5: str
    performance6: str
    time: Optional[str] = None
    reflective_dialogue_date: Optional[str] = None
    reflective_dialogue_time: Optional[str] = None
    observations: str = ""
    strengths: str = ""
    improvement_areas: str = ""
    commitments: str = ""
    evidence_image_url: Optional[str] = None
    evidence_image_base64: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def performance_levels(self) -> Tuple[str, ...]:
        """Return the six ratings in slot order."""
        return tuple(getattr(self, key) for key in PERFORMANCE_KEYS)
