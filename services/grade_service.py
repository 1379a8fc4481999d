"""
services/grade_service.py

성적 일괄 입력(upsert) 서비스.
- (학생, 과정, 과목, 시험기간) 조합마다 기존 행을 재사용하거나 새로 생성
- 항목마다 별도 세션/커밋 → 한 항목의 실패가 앞서 저장된 항목을 되돌리지 않음
- 실패 항목은 건너뛰고 사유를 결과에 담아 반환 (자동 재시도 없음)
"""

import logging
from collections import Counter, OrderedDict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, sessionmaker

from config.settings import settings
from database.db import SessionLocal
from models.exam_periods import ExamPeriod
from models.grades import Grade, GradeStatus
from schemas.grades import GradeEntry
from services.entity_lookup import EntityLookup
from services.errors import (
    GradeServiceError, GradeValidationError, NotFoundError, PersistenceError,
)

logger = logging.getLogger(__name__)


@dataclass
class SkippedEntry:
    index: int
    student_id: Optional[int]
    subject_id: Optional[int]
    error: str
    reason: str


@dataclass
class BulkSaveResult:
    """
    saved 는 저장에 성공한 "항목" 목록 (요청 순서).
    같은 (학생, 과목) 항목이 한 배치에 두 번 오면 같은 행이 두 번 들어가므로
    saved_count 는 행 수가 아니라 성공 항목 수. 행 수는 saved_row_count.
    """
    submitted_count: int
    saved: List[Grade] = field(default_factory=list)
    skipped: List[SkippedEntry] = field(default_factory=list)

    @property
    def saved_count(self) -> int:
        return len(self.saved)

    @property
    def saved_row_count(self) -> int:
        return len({grade.id for grade in self.saved})


class GradeUpsertService:
    def __init__(self, session_factory: sessionmaker = SessionLocal,
                 default_total_marks: Optional[Decimal] = None):
        self.session_factory = session_factory
        self.default_total_marks = (
            default_total_marks if default_total_marks is not None else settings.DEFAULT_TOTAL_MARKS
        )

    # ==========================================================
    # [일괄 저장]
    # ==========================================================
    def save_bulk(self, entries: Iterable[Union[GradeEntry, Dict[str, Any]]], course_id: int,
                  exam_period_id: int, actor_id: Optional[int] = None) -> BulkSaveResult:
        entries = list(entries)
        result = BulkSaveResult(submitted_count=len(entries))
        logger.info(
            f"성적 일괄 저장 시작: course_id={course_id}, exam_period_id={exam_period_id}, "
            f"entries={len(entries)}"
        )
        if not entries:
            logger.warning("제출된 성적 항목 없음")
            return result

        # ✅ 과정/시험기간은 배치당 한 번만 확인
        batch_error: Optional[NotFoundError] = None
        with self.session_factory() as db:
            lookup = EntityLookup(db)
            try:
                lookup.course(course_id)
                lookup.exam_period(exam_period_id)
            except NotFoundError as e:
                batch_error = e
                logger.warning(f"배치 참조 확인 실패, 전체 항목 건너뜀: {e.message}")

        seen = Counter()
        for index, raw in enumerate(entries):
            try:
                entry = raw if isinstance(raw, GradeEntry) else GradeEntry.model_validate(raw)
            except PydanticValidationError as e:
                self._skip(result, index, None, None, GradeValidationError(f"Malformed entry: {e.errors()}"))
                continue

            key = (entry.student_id, entry.subject_id)
            seen[key] += 1
            if seen[key] == 2:
                logger.warning(
                    f"중복 항목 발견: student_id={entry.student_id}, subject_id={entry.subject_id} "
                    f"(나중 값으로 덮어씀)"
                )

            if batch_error is not None:
                self._skip(result, index, entry.student_id, entry.subject_id, batch_error)
                continue

            try:
                grade = self._save_entry(entry, course_id, exam_period_id, actor_id)
            except GradeServiceError as e:
                self._skip(result, index, entry.student_id, entry.subject_id, e)
                continue
            result.saved.append(grade)

        logger.info(
            f"성적 일괄 저장 완료: {result.saved_count}/{result.submitted_count} 저장, "
            f"{len(result.skipped)} 건너뜀"
        )
        return result

    def _skip(self, result: BulkSaveResult, index: int, student_id, subject_id, error: GradeServiceError):
        logger.warning(
            f"성적 항목 건너뜀 [{index}] student_id={student_id}, subject_id={subject_id}: "
            f"{error.code} {error.message}"
        )
        result.skipped.append(
            SkippedEntry(index=index, student_id=student_id, subject_id=subject_id,
                         error=error.code, reason=error.message)
        )

    def _save_entry(self, entry: GradeEntry, course_id: int, exam_period_id: int,
                    actor_id: Optional[int]) -> Grade:
        """항목 하나를 자체 트랜잭션으로 저장. 실패 시 이 항목만 롤백"""
        with self.session_factory() as db:
            try:
                grade = self._apply_entry(db, entry, course_id, exam_period_id, actor_id)
                db.commit()
            except GradeServiceError:
                db.rollback()
                raise
            except SQLAlchemyError as e:
                db.rollback()
                raise PersistenceError(
                    f"Failed to save grade for student {entry.student_id}, "
                    f"subject {entry.subject_id}: {e.__class__.__name__}"
                ) from e
            db.refresh(grade)
            logger.debug(f"성적 저장 완료: grade_id={grade.id}")
            return grade

    def _apply_entry(self, db: Session, entry: GradeEntry, course_id: int,
                     exam_period_id: int, actor_id: Optional[int]) -> Grade:
        lookup = EntityLookup(db)
        lookup.student(entry.student_id)
        lookup.subject(entry.subject_id)

        grade = self._find_by_tuple(db, entry.student_id, course_id, entry.subject_id, exam_period_id)
        if grade is None:
            grade = Grade(
                student_id=entry.student_id,
                course_id=course_id,
                subject_id=entry.subject_id,
                exam_period_id=exam_period_id,
                total_marks=self.default_total_marks,
                status=GradeStatus.ACTIVE,
            )

        if entry.marks_obtained is not None:
            grade.marks_obtained = entry.marks_obtained
        if entry.total_marks is not None:
            grade.total_marks = entry.total_marks
        if "comments" in entry.model_fields_set:
            grade.comments = entry.comments or ""

        # ✅ 유효성 게이트: 통과하지 못하면 파생 필드를 건드리지 않고 저장도 하지 않음
        if not grade.recalculate():
            raise GradeValidationError(
                f"Invalid marks for student {entry.student_id}, subject {entry.subject_id}: "
                f"{grade.marks_obtained}/{grade.total_marks}"
            )

        if grade.created_by is None:
            if actor_id is None:
                logger.warning("현재 사용자 정보 없음: created_by 미설정")
            grade.created_by = actor_id

        db.add(grade)
        db.flush()
        return grade

    @staticmethod
    def _find_by_tuple(db: Session, student_id: int, course_id: int, subject_id: int,
                       exam_period_id: int) -> Optional[Grade]:
        return (
            db.query(Grade)
            .filter(
                Grade.student_id == student_id,
                Grade.course_id == course_id,
                Grade.subject_id == subject_id,
                Grade.exam_period_id == exam_period_id,
            )
            .first()
        )

    # ==========================================================
    # [조회 / 삭제]
    # ==========================================================
    def get_by_course_and_exam(self, course_id: int, exam_period_id: int) -> List[Dict[str, Any]]:
        """입력 화면 미리 채우기용"""
        with self.session_factory() as db:
            rows = (
                db.query(Grade)
                .filter(Grade.course_id == course_id, Grade.exam_period_id == exam_period_id)
                .order_by(Grade.id)
                .all()
            )
            return [
                {
                    "id": g.id,
                    "student_id": g.student_id,
                    "subject_id": g.subject_id,
                    "marks_obtained": g.marks_obtained,
                    "comments": g.comments,
                }
                for g in rows
            ]

    def delete(self, grade_id: int) -> None:
        with self.session_factory() as db:
            grade = db.get(Grade, grade_id)
            if grade is None:
                raise NotFoundError("Grade", grade_id)
            db.delete(grade)
            db.commit()
        logger.info(f"성적 삭제: grade_id={grade_id}")

    def get_student_overview(self, student_id: int) -> Dict[str, Any]:
        """학생/학부모 성적 화면: 최신 시험기간 순, 시험기간별 묶음 + 통과/우수 개수"""
        with self.session_factory() as db:
            student = EntityLookup(db).student(student_id)
            grades = (
                db.query(Grade)
                .join(ExamPeriod, ExamPeriod.id == Grade.exam_period_id)
                .options(joinedload(Grade.subject), joinedload(Grade.exam_period))
                .filter(Grade.student_id == student_id)
                .order_by(ExamPeriod.start_date.desc(), Grade.id)
                .all()
            )

            grades_by_exam: "OrderedDict[str, List[Dict[str, Any]]]" = OrderedDict()
            for g in grades:
                grades_by_exam.setdefault(g.exam_period.label, []).append({
                    "id": g.id,
                    "course_id": g.course_id,
                    "subject_id": g.subject_id,
                    "subject_name": g.subject.subject_name,
                    "marks_obtained": g.marks_obtained,
                    "total_marks": g.total_marks,
                    "percentage": g.percentage,
                    "letter_grade": g.letter_grade,
                    "grade_point": g.grade_point,
                    "comments": g.comments,
                })

            return {
                "student_id": student.id,
                "student_name": student.full_name,
                "grade_count": len(grades),
                "passing_count": sum(1 for g in grades if g.is_passing),
                "excellent_count": sum(1 for g in grades if g.is_excellent),
                "grades_by_exam": grades_by_exam,
            }
