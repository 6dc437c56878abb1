"""Request/response models for the teacher and evaluation API."""
from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from web.services.records import (
    COURSES,
    WORK_CONDITIONS,
    PerformanceLevel,
    Teacher,
    TeacherEvaluation,
)
from web.services.scoring import summarize

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
TIME_PATTERN = r"^\d{2}:\d{2}$"


class TeacherPayload(BaseModel):
    """Schema for creating or replacing a teacher."""

    dni: str = Field(..., pattern=r"^\d{8,10}$", description="8 to 10 digits")
    apellidos: str = Field(..., min_length=1, max_length=255)
    nombres: str = Field(..., min_length=1, max_length=255)
    telefono: str = ""
    correo_personal: str = ""
    correo_institucional: str = ""
    curso: str
    condicion_institucional: str
    horas_por_turno: Dict[str, int] = Field(default_factory=dict)

    @field_validator("curso")
    @classmethod
    def _known_course(cls, value: str) -> str:
        if value not in COURSES:
            raise ValueError(f"Curso desconocido: {value}")
        return value

    @field_validator("condicion_institucional")
    @classmethod
    def _known_condition(cls, value: str) -> str:
        if value not in WORK_CONDITIONS:
            raise ValueError(f"Condición institucional desconocida: {value}")
        return value

    @field_validator("horas_por_turno")
    @classmethod
    def _non_negative_hours(cls, value: Dict[str, int]) -> Dict[str, int]:
        negative = [shift for shift, hours in value.items() if hours < 0]
        if negative:
            raise ValueError(f"Horas negativas en: {', '.join(negative)}")
        return value

    def to_record(self, teacher_id: Optional[str] = None) -> Teacher:
        return Teacher(id=teacher_id, **self.model_dump())


class TeacherResponse(BaseModel):
    """Response schema for a stored teacher."""

    id: str
    dni: str
    apellidos: str
    nombres: str
    telefono: str
    correo_personal: str
    correo_institucional: str
    curso: str
    condicion_institucional: str
    horas_por_turno: Dict[str, int]
    total_horas: int
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    model_config = {"from_attributes": True}


class TeacherImportRequest(BaseModel):
    teachers: List[TeacherPayload] = Field(..., min_length=1)


class TeacherImportResult(BaseModel):
    imported: int
    skipped: int


class EvaluationPayload(BaseModel):
    """Schema for creating or replacing an evaluation (always the full record)."""

    teacher_id: str = Field(..., min_length=1)
    evaluator_id: str = ""
    evaluator_name: str = Field(..., min_length=1)
    date: str = Field(..., pattern=DATE_PATTERN)
    time: Optional[str] = Field(default=None, pattern=TIME_PATTERN)
    reflective_dialogue_date: Optional[str] = Field(default=None, pattern=DATE_PATTERN)
    reflective_dialogue_time: Optional[str] = Field(default=None, pattern=TIME_PATTERN)
    performance1: PerformanceLevel
    performance2: PerformanceLevel
    performance3: PerformanceLevel
    performance4: PerformanceLevel
    performance5: PerformanceLevel
    performance6: PerformanceLevel
    observations: str = ""
    strengths: str = ""
    improvement_areas: str = ""
    commitments: str = ""
    evidence_image_url: Optional[str] = None
    evidence_image_base64: Optional[str] = None

    def to_record(self, evaluation_id: Optional[str] = None) -> TeacherEvaluation:
        return TeacherEvaluation(id=evaluation_id, **self.model_dump(mode="json"))


class ScoreSummaryResponse(BaseModel):
    average: float
    level: str
    band: str
    label: str


class EvaluationResponse(BaseModel):
    """Response schema for a stored evaluation and its derived summary."""

    id: str
    teacher_id: str
    evaluator_id: str
    evaluator_name: str
    date: str
    time: Optional[str] = None
    reflective_dialogue_date: Optional[str] = None
    reflective_dialogue_time: Optional[str] = None
    performance1: str
    performance2: str
    performance3: str
    performance4: str
    performance5: str
    performance6: str
    observations: str
    strengths: str
    improvement_areas: str
    commitments: str
    evidence_image_url: Optional[str] = None
    has_evidence_image: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    summary: ScoreSummaryResponse

    @classmethod
    def from_record(cls, evaluation: TeacherEvaluation) -> "EvaluationResponse":
        data = {name: getattr(evaluation, name) for name in cls.model_fields if hasattr(evaluation, name)}
        data["has_evidence_image"] = bool(evaluation.evidence_image_base64)
        data["summary"] = ScoreSummaryResponse(**summarize(evaluation).to_dict())
        return cls(**data)


class BatchReportRequest(BaseModel):
    """Ordered evaluation ids to include in a batch report."""

    evaluation_ids: List[str] = Field(..., min_length=1)
