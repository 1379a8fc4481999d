"""
services/entity_lookup.py

식별자로 학생/과정/과목/시험기간/템플릿을 조회하는 얇은 래퍼.
- 찾지 못하면 NotFoundError (템플릿만 예외적으로 None 반환)
"""

from typing import Optional

from sqlalchemy.orm import Session

from models.courses import Course
from models.exam_periods import ExamPeriod
from models.report_templates import ReportTemplate
from models.students import Student
from models.subjects import Subject
from services.errors import NotFoundError


class EntityLookup:
    def __init__(self, db: Session):
        self.db = db

    def _get(self, model, entity: str, entity_id: int):
        obj = self.db.get(model, entity_id)
        if obj is None:
            raise NotFoundError(entity, entity_id)
        return obj

    def student(self, student_id: int) -> Student:
        return self._get(Student, "Student", student_id)

    def course(self, course_id: int) -> Course:
        return self._get(Course, "Course", course_id)

    def subject(self, subject_id: int) -> Subject:
        return self._get(Subject, "Subject", subject_id)

    def exam_period(self, exam_period_id: int) -> ExamPeriod:
        return self._get(ExamPeriod, "Exam period", exam_period_id)

    def template(self, template_id: Optional[int]) -> Optional[ReportTemplate]:
        if template_id is None:
            return None
        return self.db.get(ReportTemplate, template_id)
