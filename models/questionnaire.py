"""Модель анкеты"""
from sqlalchemy import Column, Integer, String, Text, CheckConstraint
from .database import Base


class Questionnaire(Base):
    __tablename__ = "questionnaires"

    id = Column(String(36), primary_key=True)
    study_id = Column(String(36), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    questions = Column(Text, nullable=False, default="")  # JSON с вопросами
    max_attempts = Column(Integer, nullable=True)  # NULL - без ограничения попыток
    hours_between_attempts = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("hours_between_attempts >= 0", name="ck_hours_between_attempts"),
    )

    @property
    def is_unbounded(self) -> bool:
        return self.max_attempts is None

    def __repr__(self):
        return f"<Questionnaire(id={self.id}, max_attempts={self.max_attempts})>"
