from fastapi import APIRouter, Depends

from database.db import SessionLocal
from dependencies.security import Actor, require_actor
from schemas.grades import BulkGradeRequest, BulkSaveOut, GradeFormRow, GradeOut, SkippedEntryOut
from services.grade_service import GradeUpsertService

router = APIRouter(prefix="/grades", tags=["grades"], dependencies=[Depends(require_actor)])

# ==========================================================
# [공통] 서비스 주입 (항목별 커밋을 위해 세션 팩토리를 넘김)
# ==========================================================
def get_grade_service() -> GradeUpsertService:
    return GradeUpsertService(SessionLocal)

# ==========================================================
# [1단계] 성적 일괄 입력
# ==========================================================

# ✅ [BULK UPSERT] 과정 + 시험기간 단위 성적 일괄 저장
# - 항목별로 독립 커밋, 실패 항목은 skipped 로 보고
@router.post("/bulk")
def save_bulk_grades(
    payload: BulkGradeRequest,
    actor: Actor = Depends(require_actor),
    service: GradeUpsertService = Depends(get_grade_service),
):
    result = service.save_bulk(payload.entries, payload.course_id, payload.exam_period_id, actor.id)
    data = BulkSaveOut(
        submitted_count=result.submitted_count,
        saved_count=result.saved_count,
        saved_row_count=result.saved_row_count,
        saved=[GradeOut.model_validate(g) for g in result.saved],
        skipped=[SkippedEntryOut(**vars(s)) for s in result.skipped],
    )
    if result.skipped:
        message = f"{result.saved_count} of {result.submitted_count} grades saved; {len(result.skipped)} skipped"
    else:
        message = "Grades saved successfully!"
    return {"success": True, "data": data, "message": message}

# ==========================================================
# [2단계] 조회
# ==========================================================

# ✅ [READ] 입력 화면 미리 채우기용 기존 성적
@router.get("/course/{course_id}/exam/{exam_period_id}")
def read_grades_for_course_and_exam(
    course_id: int,
    exam_period_id: int,
    service: GradeUpsertService = Depends(get_grade_service),
):
    rows = service.get_by_course_and_exam(course_id, exam_period_id)
    return {"success": True, "data": [GradeFormRow(**r) for r in rows]}

# ✅ [READ] 학생 성적 현황 (시험기간별 묶음 + 통과/우수 개수)
@router.get("/student/{student_id}")
def read_student_grades(student_id: int, service: GradeUpsertService = Depends(get_grade_service)):
    return {"success": True, "data": service.get_student_overview(student_id)}

# ==========================================================
# [3단계] 삭제
# ==========================================================

# ✅ [DELETE] 성적 한 건 삭제 (없으면 404)
@router.delete("/{grade_id}")
def delete_grade(grade_id: int, service: GradeUpsertService = Depends(get_grade_service)):
    service.delete(grade_id)
    return {
        "success": True,
        "data": {"grade_id": grade_id, "message": "Grade deleted successfully"}
    }
