# Di dalam file: models.py

from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, Integer, String

from database import Base


def _now():
    return datetime.now(timezone.utc)


# Mendefinisikan model tabel untuk riwayat perhitungan (audit log)
class CalculationRecord(Base):
    __tablename__ = "calculation_records"  # Nama tabel di database

    id = Column(Integer, primary_key=True, index=True)
    created_at = Column(DateTime(timezone=True), default=_now, index=True)
    madhab = Column(String, index=True, nullable=True)   # None bila kode madzhab tidak sah
    success = Column(Boolean, index=True, default=False)
    estate_total = Column(Float, nullable=True)           # hanya untuk filter/tampilan
    duration_ms = Column(Float, default=0.0)
    error_code = Column(String, nullable=True)
    input_snapshot = Column(JSON)   # CalculationInput dalam bentuk JSON
    result = Column(JSON)           # CalculationResult dalam bentuk JSON
