"""Модель запланированной анкеты"""
from sqlalchemy import Column, String, ForeignKey, Index
from utils.timestamp import TimeStamp
from .database import Base


class ScheduleStatus:
    """Статусы расписания: только pending -> completed"""
    PENDING = "pending"
    COMPLETED = "completed"


class ScheduledQuestionnaire(Base):
    __tablename__ = "scheduled_questionnaires"

    id = Column(String(36), primary_key=True)
    questionnaire_id = Column(String(36), ForeignKey("questionnaires.id"), nullable=False)
    participant_id = Column(String(36), ForeignKey("participants.id"), nullable=False)
    scheduled_at = Column(TimeStamp, nullable=False)
    status = Column(String(16), nullable=False, default=ScheduleStatus.PENDING)

    __table_args__ = (
        Index("idx_schedule_pair_status", "questionnaire_id", "participant_id", "status"),
    )

    def __repr__(self):
        return f"<ScheduledQuestionnaire(id={self.id}, status={self.status})>"
