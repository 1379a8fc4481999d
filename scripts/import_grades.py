"""
scripts/import_grades.py

CSV 성적 파일을 일괄 입력 서비스로 가져오기.
- 컬럼: student_id, subject_id, marks_obtained, total_marks, comments
- 빈 칸은 "입력하지 않음"으로 취급 (total_marks 생략 시 신규 행은 100점 만점)

사용: python -m scripts.import_grades data/grades.csv --course-id 1 --exam-period-id 2 [--actor-id 7]
"""

import argparse
import csv

from services.grade_service import GradeUpsertService

CSV_PATH = "data/grades.csv"  # ✅ 기본 파일 경로

OPTIONAL_COLUMNS = ("marks_obtained", "total_marks", "comments")


def read_entries(csv_path: str) -> list:
    entries = []
    with open(csv_path, newline="", encoding="utf-8-sig") as csvfile:
        reader = csv.DictReader(csvfile)
        for row in reader:
            entry = {
                "student_id": row["student_id"],        # 학생 ID
                "subject_id": row["subject_id"],        # 과목 ID
            }
            for column in OPTIONAL_COLUMNS:
                value = (row.get(column) or "").strip()
                if value:
                    entry[column] = value
            entries.append(entry)
    return entries


def import_grades(csv_path: str, course_id: int, exam_period_id: int, actor_id=None):
    entries = read_entries(csv_path)
    result = GradeUpsertService().save_bulk(entries, course_id, exam_period_id, actor_id)

    for skipped in result.skipped:
        print(f"⚠ {skipped.index + 2}행 건너뜀 ({skipped.error}): {skipped.reason}")
    print(f"✅ 성적 CSV → DB 반영 완료: {result.saved_count}/{result.submitted_count} 저장")
    return result


def main(argv=None):
    parser = argparse.ArgumentParser(description="CSV 성적 일괄 입력")
    parser.add_argument("csv_path", nargs="?", default=CSV_PATH)
    parser.add_argument("--course-id", type=int, required=True)
    parser.add_argument("--exam-period-id", type=int, required=True)
    parser.add_argument("--actor-id", type=int, default=None)
    args = parser.parse_args(argv)
    import_grades(args.csv_path, args.course_id, args.exam_period_id, args.actor_id)


if __name__ == "__main__":
    main()
