"""Модель результата прохождения анкеты"""
from sqlalchemy import Column, String, Text, ForeignKey
from utils.timestamp import TimeStamp
from .database import Base


class QuestionnaireResult(Base):
    __tablename__ = "questionnaire_results"

    id = Column(String(36), primary_key=True)
    answers = Column(Text, nullable=False)  # JSON с ответами
    questionnaire_id = Column(String(36), ForeignKey("questionnaires.id"), nullable=False)
    participant_id = Column(String(36), ForeignKey("participants.id"), nullable=False)
    questionnaire_schedule_id = Column(
        String(36), ForeignKey("scheduled_questionnaires.id"), nullable=False, unique=True
    )
    completed_at = Column(TimeStamp, nullable=False)

    def __repr__(self):
        return f"<QuestionnaireResult(id={self.id}, schedule={self.questionnaire_schedule_id})>"
