from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from parkwatch.infrastructure.db.base import Base


class CurrentCarORM(Base):
    __tablename__ = "current_cars"
    __table_args__ = (
        Index("ix_current_cars_lot_plate", "parking_lot_id", "car_number_plate"),
    )

    parking_lot_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    unique_code: Mapped[str] = mapped_column(String(64), primary_key=True)
    car_number_plate: Mapped[str] = mapped_column(String(64), nullable=False)
    time_of_entry: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    image_url: Mapped[str] = mapped_column(Text, nullable=False)


class CarHistoryORM(Base):
    __tablename__ = "car_history"

    parking_lot_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    unique_code: Mapped[str] = mapped_column(String(64), primary_key=True)
    car_number_plate: Mapped[str] = mapped_column(String(64), nullable=False)
    time_of_entry: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    image_url: Mapped[str] = mapped_column(Text, nullable=False)
    time_of_exit: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
