"""
Record store for teachers and evaluations.

:class:`EvaluationSource` is the contract the report pipeline relies on.
:class:`InMemoryEvaluationStore` implements it with thread-safe dictionaries;
data is lost on restart.
"""
from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Protocol, Sequence, Tuple

from web.exceptions import DuplicateDniError, MissingReference
from web.services.records import Teacher, TeacherEvaluation, calculate_total_hours

logger = logging.getLogger(__name__)


class EvaluationSource(Protocol):
    """Record access needed to generate evaluation reports."""

    def get_teacher(self, teacher_id: str) -> Optional[Teacher]: ...

    def get_evaluation(self, evaluation_id: str) -> Optional[TeacherEvaluation]: ...

    def list_evaluations_by_teacher(self, teacher_id: str) -> List[TeacherEvaluation]: ...

    def save_evaluation(self, evaluation: TeacherEvaluation) -> TeacherEvaluation: ...

    def delete_evaluation(self, evaluation_id: str) -> str: ...


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    return uuid.uuid4().hex


def _newest_first(evaluations: Iterable[TeacherEvaluation]) -> List[TeacherEvaluation]:
    return sorted(evaluations, key=lambda e: e.date, reverse=True)


def _copy_teacher(teacher: Teacher) -> Teacher:
    # the shift dict is the only mutable field
    return replace(teacher, horas_por_turno=dict(teacher.horas_por_turno))


class InMemoryEvaluationStore:
    """Thread-safe storage for teacher and evaluation records."""

    def __init__(self):
        self._teachers: Dict[str, Teacher] = {}
        self._evaluations: Dict[str, TeacherEvaluation] = {}
        self._lock = threading.Lock()

    # Teachers

    def list_teachers(self) -> List[Teacher]:
        with self._lock:
            teachers = [_copy_teacher(t) for t in self._teachers.values()]
        return sorted(teachers, key=lambda t: t.apellidos)

    def get_teacher(self, teacher_id: str) -> Optional[Teacher]:
        if not teacher_id:
            return None
        with self._lock:
            teacher = self._teachers.get(teacher_id)
            return _copy_teacher(teacher) if teacher else None

    def _dni_taken(self, dni: str, exclude_id: Optional[str] = None) -> bool:
        return any(t.dni == dni and t.id != exclude_id for t in self._teachers.values())

    def save_teacher(self, teacher: Teacher) -> Teacher:
        """Create (no id) or fully replace (id) a teacher; total hours are recomputed."""
        now = _now()
        with self._lock:
            existing = self._teachers.get(teacher.id) if teacher.id else None
            if teacher.id and existing is None:
                raise MissingReference("Teacher", teacher.id)
            if self._dni_taken(teacher.dni, exclude_id=teacher.id):
                raise DuplicateDniError(teacher.dni, updating=existing is not None)

            stored = replace(
                teacher,
                id=teacher.id or _new_id(),
                horas_por_turno=dict(teacher.horas_por_turno),
                total_horas=calculate_total_hours(teacher.horas_por_turno),
                created_at=existing.created_at if existing else now,
                updated_at=now,
            )
            self._teachers[stored.id] = stored
        logger.info(f"Saved teacher {stored.id} ({'updated' if existing else 'created'})")
        return _copy_teacher(stored)

    def delete_teacher(self, teacher_id: str) -> str:
        with self._lock:
            if self._teachers.pop(teacher_id, None) is None:
                raise MissingReference("Teacher", teacher_id)
        logger.info(f"Deleted teacher {teacher_id}")
        return teacher_id

    def import_teachers(self, teachers: Sequence[Teacher]) -> int:
        """Create every teacher whose DNI is not registered yet; return how many were added."""
        imported = 0
        for teacher in teachers:
            try:
                self.save_teacher(replace(teacher, id=None))
            except DuplicateDniError as exc:
                logger.warning(f"Skipping import: {exc}")
                continue
            imported += 1
        logger.info(f"Imported {imported} of {len(teachers)} teachers")
        return imported

    # Evaluations

    def list_evaluations(self) -> List[TeacherEvaluation]:
        with self._lock:
            evaluations = [replace(e) for e in self._evaluations.values()]
        return _newest_first(evaluations)

    def get_evaluation(self, evaluation_id: str) -> Optional[TeacherEvaluation]:
        if not evaluation_id:
            return None
        with self._lock:
            evaluation = self._evaluations.get(evaluation_id)
            return replace(evaluation) if evaluation else None

    def list_evaluations_by_teacher(self, teacher_id: str) -> List[TeacherEvaluation]:
        """Evaluations of one teacher, newest monitoring date first."""
        if not teacher_id:
            logger.warning("Evaluations requested without a teacher id")
            return []
        with self._lock:
            evaluations = [replace(e) for e in self._evaluations.values() if e.teacher_id == teacher_id]
        return _newest_first(evaluations)

    def save_evaluation(self, evaluation: TeacherEvaluation) -> TeacherEvaluation:
        """Create (no id) or fully replace (id) an evaluation.

        ``created_at`` is kept from the stored record on replacement and
        ``updated_at`` is refreshed on every save.
        """
        now = _now()
        with self._lock:
            existing = self._evaluations.get(evaluation.id) if evaluation.id else None
            if evaluation.id and existing is None:
                raise MissingReference("Evaluation", evaluation.id)

            stored = replace(
                evaluation,
                id=evaluation.id or _new_id(),
                created_at=existing.created_at if existing else now,
                updated_at=now,
            )
            self._evaluations[stored.id] = stored
        logger.info(f"Saved evaluation {stored.id} for teacher {stored.teacher_id}")
        return replace(stored)

    def delete_evaluation(self, evaluation_id: str) -> str:
        with self._lock:
            if self._evaluations.pop(evaluation_id, None) is None:
                raise MissingReference("Evaluation", evaluation_id)
        logger.info(f"Deleted evaluation {evaluation_id}")
        return evaluation_id


def require_teacher(source: EvaluationSource, teacher_id: str) -> Teacher:
    teacher = source.get_teacher(teacher_id)
    if teacher is None:
        raise MissingReference("Teacher", teacher_id)
    return teacher


def require_evaluation(source: EvaluationSource, evaluation_id: str) -> TeacherEvaluation:
    evaluation = source.get_evaluation(evaluation_id)
    if evaluation is None:
        raise MissingReference("Evaluation", evaluation_id)
    return evaluation


def collect_report_pairs(
    source: EvaluationSource,
    evaluation_ids: Sequence[str],
) -> List[Tuple[Teacher, TeacherEvaluation]]:
    """Resolve evaluation ids into (teacher, evaluation) pairs, keeping their order."""
    pairs = []
    for evaluation_id in evaluation_ids:
        evaluation = require_evaluation(source, evaluation_id)
        pairs.append((require_teacher(source, evaluation.teacher_id), evaluation))
    return pairs


# Global instance
evaluation_store = InMemoryEvaluationStore()
