"""
Database models for the application.
"""
from sqlalchemy import Column, DateTime, Integer, String, Text, func
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Reservation(Base):
    """A single booked transfer, tour or chauffeur service."""
    __tablename__ = "reservations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_name = Column(String(255), nullable=False, default="")
    customer_email = Column(String(255), nullable=False, default="")
    customer_phone = Column(String(50), nullable=False, default="")
    pickup_location = Column(String(255), nullable=False, default="")
    dropoff_location = Column(String(255), nullable=False, default="")
    pickup_date = Column(String(32), nullable=False, default="")
    pickup_time = Column(String(16), nullable=False, default="")
    vehicle_type = Column(String(100), nullable=False, default="")
    service_type = Column(String(20), nullable=False, default="TRANSFER")
    passengers = Column(Integer, nullable=False, default=1)
    special_requests = Column(Text, nullable=False, default="")
    status = Column(String(50), nullable=False, default="CONFIRMED")
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    def to_dict(self) -> dict:
        return {column.name: getattr(self, column.name) for column in self.__table__.columns}
