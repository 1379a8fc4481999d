from database.db import Base, engine

# ✅ 테이블 등록을 위해 모델 모듈을 모두 import
from models import courses, exam_periods, grades, report_templates, students, subjects  # noqa: F401


def init_db():
    Base.metadata.create_all(bind=engine)
    print("✅ 테이블 생성 완료: " + ", ".join(sorted(Base.metadata.tables)))


if __name__ == "__main__":
    init_db()
