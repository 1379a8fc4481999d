from sqlalchemy import Column, Integer, String
from database.db import Base

class Course(Base):
    __tablename__ = "courses"  # 과정(수업) 정보 테이블

    id = Column(Integer, primary_key=True, index=True)         # 과정 고유 ID (PK)
    course_name = Column(String(150), nullable=False)         # 과정 이름
    course_code = Column(String(20), unique=True)             # 과정 코드
