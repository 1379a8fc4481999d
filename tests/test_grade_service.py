from decimal import Decimal

import pytest

from models.grades import Grade, GradeStatus
from schemas.grades import GradeEntry
from services import grade_calculator as gc
from services.errors import NotFoundError
from services.grade_service import GradeUpsertService


@pytest.fixture
def service(seeded):
    return GradeUpsertService(seeded, default_total_marks=Decimal("100"))


def _load(session_factory, **filters) -> Grade:
    with session_factory() as db:
        return db.query(Grade).filter_by(**filters).one()


def test_new_entry_is_saved_with_derived_fields(service, seeded):
    result = service.save_bulk(
        [{"student_id": 1, "subject_id": 1, "marks_obtained": 46, "total_marks": 50, "comments": "Great work"}],
        course_id=1, exam_period_id=1, actor_id=7,
    )

    assert result.submitted_count == 1
    assert result.saved_count == 1
    assert result.skipped == []

    grade = _load(seeded, student_id=1, subject_id=1)
    assert grade.percentage == Decimal("92.00")
    assert grade.letter_grade == "A"
    assert grade.grade_point == Decimal("4.00")
    assert grade.comments == "Great work"
    assert grade.created_by == 7
    assert grade.status == GradeStatus.ACTIVE
    assert grade.created_at is not None


def test_omitted_total_marks_defaults_to_100(service, seeded):
    service.save_bulk([{"student_id": 1, "subject_id": 2, "marks_obtained": 73}], 1, 1, actor_id=7)

    grade = _load(seeded, student_id=1, subject_id=2)
    assert grade.total_marks == Decimal("100")
    assert grade.percentage == Decimal("73.00")
    assert grade.letter_grade == "B"


def test_resubmission_updates_the_same_row(service, seeded, grade_count):
    first = service.save_bulk([{"student_id": 1, "subject_id": 1, "marks_obtained": 18, "total_marks": 50}], 1, 1, 7)
    second = service.save_bulk([{"student_id": 1, "subject_id": 1, "marks_obtained": 45, "total_marks": 50}], 1, 1, 99)

    assert grade_count(student_id=1, course_id=1, subject_id=1, exam_period_id=1) == 1
    assert first.saved[0].id == second.saved[0].id

    grade = _load(seeded, student_id=1, subject_id=1)
    assert grade.marks_obtained == Decimal("45.00")
    assert grade.percentage == Decimal("90.00")
    assert grade.letter_grade == "A"
    # 최초 입력자는 유지
    assert grade.created_by == 7


def test_resubmission_without_total_keeps_existing_total(service, seeded):
    service.save_bulk([{"student_id": 1, "subject_id": 1, "marks_obtained": 40, "total_marks": 50}], 1, 1, 7)
    service.save_bulk([{"student_id": 1, "subject_id": 1, "marks_obtained": 25}], 1, 1, 7)

    grade = _load(seeded, student_id=1, subject_id=1)
    assert grade.total_marks == Decimal("50.00")
    assert grade.percentage == Decimal("50.00")
    assert grade.letter_grade == "C"


@pytest.mark.parametrize("bad_position", [0, 1, 2])
def test_unknown_subject_only_skips_that_entry(service, grade_count, bad_position):
    entries = [
        {"student_id": 1, "subject_id": 1, "marks_obtained": 80},
        {"student_id": 1, "subject_id": 2, "marks_obtained": 70},
        {"student_id": 2, "subject_id": 3, "marks_obtained": 60},
    ]
    entries[bad_position] = dict(entries[bad_position], subject_id=999)

    result = service.save_bulk(entries, 1, 1, actor_id=7)

    assert result.saved_count == 2
    assert len(result.skipped) == 1
    skipped = result.skipped[0]
    assert skipped.index == bad_position
    assert skipped.subject_id == 999
    assert skipped.error == "NOT_FOUND"
    assert "Subject" in skipped.reason
    assert grade_count() == 2


def test_unknown_student_is_skipped(service, grade_count):
    result = service.save_bulk([{"student_id": 404, "subject_id": 1, "marks_obtained": 50}], 1, 1, 7)

    assert result.saved_count == 0
    assert result.skipped[0].error == "NOT_FOUND"
    assert grade_count() == 0


def test_unknown_course_skips_every_entry(service, grade_count):
    result = service.save_bulk(
        [{"student_id": 1, "subject_id": 1, "marks_obtained": 50},
         {"student_id": 2, "subject_id": 1, "marks_obtained": 60}],
        course_id=42, exam_period_id=1, actor_id=7,
    )

    assert result.saved_count == 0
    assert [s.error for s in result.skipped] == ["NOT_FOUND", "NOT_FOUND"]
    assert "Course" in result.skipped[0].reason
    assert grade_count() == 0


@pytest.mark.parametrize(
    "entry",
    [
        {"student_id": 1, "subject_id": 1},                                          # 점수 없음
        {"student_id": 1, "subject_id": 1, "marks_obtained": -5},
        {"student_id": 1, "subject_id": 1, "marks_obtained": 60, "total_marks": 50},
        {"student_id": 1, "subject_id": 1, "marks_obtained": 0, "total_marks": 0},
    ],
)
def test_invalid_marks_are_skipped_and_not_persisted(service, grade_count, entry):
    result = service.save_bulk([entry, {"student_id": 2, "subject_id": 1, "marks_obtained": 55}], 1, 1, 7)

    assert result.saved_count == 1
    assert result.skipped[0].index == 0
    assert result.skipped[0].error == "INVALID_MARKS"
    assert grade_count(student_id=1) == 0
    assert grade_count(student_id=2) == 1


def test_invalid_resubmission_leaves_existing_row_untouched(service, seeded):
    service.save_bulk([{"student_id": 1, "subject_id": 1, "marks_obtained": 46, "total_marks": 50}], 1, 1, 7)
    result = service.save_bulk([{"student_id": 1, "subject_id": 1, "marks_obtained": 70}], 1, 1, 7)

    assert result.saved_count == 0
    grade = _load(seeded, student_id=1, subject_id=1)
    assert grade.marks_obtained == Decimal("46.00")
    assert grade.percentage == Decimal("92.00")


def test_malformed_entry_is_skipped(service):
    result = service.save_bulk(
        [{"subject_id": 1, "marks_obtained": 50}, {"student_id": 1, "subject_id": 1, "marks_obtained": 50}],
        1, 1, 7,
    )

    assert result.saved_count == 1
    assert result.skipped[0].index == 0
    assert result.skipped[0].error == "INVALID_MARKS"


def test_comments_supplied_as_null_are_cleared(service, seeded):
    service.save_bulk([{"student_id": 1, "subject_id": 1, "marks_obtained": 40, "comments": "Retake"}], 1, 1, 7)
    service.save_bulk([{"student_id": 1, "subject_id": 1, "marks_obtained": 41}], 1, 1, 7)
    assert _load(seeded, student_id=1, subject_id=1).comments == "Retake"

    service.save_bulk([{"student_id": 1, "subject_id": 1, "marks_obtained": 42, "comments": None}], 1, 1, 7)
    assert _load(seeded, student_id=1, subject_id=1).comments == ""


def test_duplicate_entries_in_one_batch_keep_the_last(service, seeded, grade_count):
    result = service.save_bulk(
        [GradeEntry(student_id=1, subject_id=1, marks_obtained=Decimal("30")),
         GradeEntry(student_id=1, subject_id=1, marks_obtained=Decimal("85"))],
        1, 1, 7,
    )

    assert result.saved_count == 2
    assert grade_count() == 1
    assert _load(seeded, student_id=1, subject_id=1).percentage == Decimal("85.00")


def test_persistence_failure_does_not_unwind_earlier_entries(service, grade_count, monkeypatch):
    # 조회가 항상 "없음"을 반환하면 같은 조합의 두 번째 저장이 유니크 제약에 걸림 (경합 재현)
    monkeypatch.setattr(GradeUpsertService, "_find_by_tuple", staticmethod(lambda *args: None))

    result = service.save_bulk(
        [{"student_id": 1, "subject_id": 1, "marks_obtained": 50},
         {"student_id": 2, "subject_id": 1, "marks_obtained": 60},
         {"student_id": 1, "subject_id": 1, "marks_obtained": 70},
         {"student_id": 2, "subject_id": 2, "marks_obtained": 80}],
        1, 1, 7,
    )

    assert result.saved_count == 3
    assert len(result.skipped) == 1
    assert result.skipped[0].index == 2
    assert result.skipped[0].error == "PERSISTENCE_ERROR"
    assert grade_count() == 3


def test_missing_actor_leaves_created_by_unset(service, seeded):
    service.save_bulk([{"student_id": 1, "subject_id": 1, "marks_obtained": 50}], 1, 1, actor_id=None)
    assert _load(seeded, student_id=1, subject_id=1).created_by is None

    service.save_bulk([{"student_id": 1, "subject_id": 1, "marks_obtained": 55}], 1, 1, actor_id=3)
    assert _load(seeded, student_id=1, subject_id=1).created_by == 3


def test_empty_batch_returns_empty_result(service):
    result = service.save_bulk([], 1, 1, 7)
    assert result.submitted_count == 0
    assert result.saved_count == 0


def test_get_by_course_and_exam_returns_form_rows(service, add_grade):
    grade_id = add_grade(1, 1, 46, 50, comments="Good")
    add_grade(1, 2, 30, 50, exam_period_id=2)

    rows = service.get_by_course_and_exam(1, 1)

    assert rows == [{
        "id": grade_id,
        "student_id": 1,
        "subject_id": 1,
        "marks_obtained": Decimal("46.00"),
        "comments": "Good",
    }]


def test_delete_removes_one_row(service, add_grade, grade_count):
    keep = add_grade(1, 1, 46, 50)
    gone = add_grade(1, 2, 30, 50)

    service.delete(gone)

    assert grade_count() == 1
    assert grade_count(id=keep) == 1


def test_delete_missing_grade_raises_not_found(service):
    with pytest.raises(NotFoundError):
        service.delete(12345)


def test_student_overview_groups_by_exam_newest_first(service, add_grade):
    add_grade(1, 1, 46, 50, exam_period_id=1)
    add_grade(1, 2, 18, 50, exam_period_id=1)
    add_grade(1, 1, 40, 50, exam_period_id=2)

    overview = service.get_student_overview(1)

    assert list(overview["grades_by_exam"]) == ["Mid Term (2025-2026)", "First Term Exam (2025-2026)"]
    assert overview["grade_count"] == 3
    assert overview["passing_count"] == 2
    assert overview["excellent_count"] == 2
    assert overview["student_name"] == "Alice Smith"


def test_student_overview_for_unknown_student(service):
    with pytest.raises(NotFoundError):
        service.get_student_overview(999)


def test_marks_are_stored_at_two_places_and_percentage_matches(service, seeded):
    service.save_bulk([{"student_id": 1, "subject_id": 1, "marks_obtained": "46.005", "total_marks": "50.004"}],
                      1, 1, 7)

    grade = _load(seeded, student_id=1, subject_id=1)
    assert grade.marks_obtained == Decimal("46.01")
    assert grade.total_marks == Decimal("50.00")
    assert grade.percentage == Decimal("92.02")
    assert grade.percentage == gc.calculate_percentage(grade.marks_obtained, grade.total_marks)


def test_marks_valid_after_rounding_are_accepted(service, seeded):
    result = service.save_bulk([{"student_id": 1, "subject_id": 1, "marks_obtained": "50.004", "total_marks": 50}],
                               1, 1, 7)

    assert result.saved_count == 1
    assert _load(seeded, student_id=1, subject_id=1).percentage == Decimal("100.00")


def test_saved_row_count_collapses_duplicate_entries(service):
    result = service.save_bulk(
        [{"student_id": 1, "subject_id": 1, "marks_obtained": 30},
         {"student_id": 1, "subject_id": 1, "marks_obtained": 85},
         {"student_id": 2, "subject_id": 1, "marks_obtained": 60}],
        1, 1, 7,
    )

    assert result.saved_count == 3
    assert result.saved_row_count == 2
