from sqlalchemy import Column, Integer, String
from database.db import Base

class Student(Base):
    __tablename__ = "students"  # 학생 기본 정보 테이블

    id = Column(Integer, primary_key=True, index=True)               # 고유 학생 ID (Primary Key)
    username = Column(String(50), nullable=False, unique=True)      # 학번/로그인 ID (성적표의 Student ID)
    first_name = Column(String(100), nullable=False)                # 이름
    last_name = Column(String(100), nullable=False)                 # 성
    email = Column(String(200))                                     # 이메일 (없으면 성적표에 N/A)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
