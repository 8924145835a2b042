"""Модель участника исследования"""
from sqlalchemy import Column, String
from .database import Base


class Participant(Base):
    __tablename__ = "participants"

    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)

    def __repr__(self):
        return f"<Participant(id={self.id})>"
