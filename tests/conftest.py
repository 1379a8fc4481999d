import os
from datetime import date

# ✅ settings 가 import 되기 전에 테스트용 환경변수 주입
os.environ["DATABASE_URL_OVERRIDE"] = "sqlite://"
os.environ["INTERNAL_API_TOKEN"] = "test-token"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from database.db import Base
from models.courses import Course
from models.exam_periods import ExamPeriod
from models.grades import Grade
from models.report_templates import ReportTemplate
from models.students import Student
from models.subjects import Subject



@pytest.fixture
def engine(tmp_path):
    # 파일 기반 SQLite: 세션마다 별도 커넥션 → 항목별 커밋 경계를 실제로 검증
    engine = create_engine(
        f"sqlite:///{tmp_path / 'grades.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def seeded(session_factory):
    """학생 2, 과정 1, 과목 3, 시험기간 2, 템플릿 3"""
    with session_factory() as db:
        db.add_all([
            Student(id=1, username="STU001", first_name="Alice", last_name="Smith", email="alice@example.com"),
            Student(id=2, username="STU002", first_name="Bob", last_name="Jones", email=None),
            Course(id=1, course_name="Grade 10 Science Stream", course_code="G10S"),
            Subject(id=1, subject_name="Mathematics", subject_code="MATH"),
            Subject(id=2, subject_name="English", subject_code="ENG"),
            Subject(id=3, subject_name="Science", subject_code="SCI"),
            ExamPeriod(id=1, exam_name="First Term Exam", academic_year="2025-2026", semester="1",
                       start_date=date(2025, 10, 1), end_date=date(2025, 10, 10)),
            ExamPeriod(id=2, exam_name="Mid Term", academic_year="2025-2026", semester="2",
                       start_date=date(2026, 3, 1), end_date=date(2026, 3, 5)),
            ReportTemplate(id=1, template_name="Default", header_text="Excellence Through Effort",
                           footer_text="Parents: please sign and return.", is_active=True),
            ReportTemplate(id=2, template_name="Blank", header_text="   ", footer_text="", is_active=True),
            ReportTemplate(id=3, template_name="Retired", header_text="Old Motto",
                           footer_text="Old footer", is_active=False),
        ])
        db.commit()
    return session_factory


@pytest.fixture
def add_grade(seeded):
    """모델 이벤트로 파생 필드가 계산된 성적 행을 바로 저장"""
    def _add(student_id, subject_id, marks, total, exam_period_id=1, course_id=1, comments=None):
        with seeded() as db:
            grade = Grade(
                student_id=student_id, course_id=course_id, subject_id=subject_id,
                exam_period_id=exam_period_id, marks_obtained=marks, total_marks=total,
                comments=comments,
            )
            db.add(grade)
            db.commit()
            return grade.id
    return _add


@pytest.fixture
def grade_count(session_factory):
    def _count(**filters) -> int:
        with session_factory() as db:
            return db.query(Grade).filter_by(**filters).count()
    return _count
