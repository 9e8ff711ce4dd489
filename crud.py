# Di dalam file: crud.py

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

import models
import schemas


def create_calculation_record(db: Session,
                              calculation_input: schemas.CalculationInput,
                              result: schemas.CalculationResult) -> models.CalculationRecord:
    """
    Simpan satu perhitungan (input + hasil) ke riwayat.
    Hasil gagal validasi juga dicatat agar statistik keberhasilan akurat.
    """
    db_record = models.CalculationRecord(
        madhab=result.madhab.value if result.madhab else None,
        success=result.success,
        estate_total=float(calculation_input.estate.total),
        duration_ms=result.calculation_time_ms,
        error_code=result.error_code,
        input_snapshot=calculation_input.model_dump(mode="json"),
        result=result.model_dump(mode="json"),
    )
    db.add(db_record)
    db.commit()
    db.refresh(db_record)
    return db_record


def get_calculation_record(db: Session, record_id: int) -> Optional[models.CalculationRecord]:
    return db.query(models.CalculationRecord).filter(models.CalculationRecord.id == record_id).first()


def get_calculation_records(db: Session, madhab: Optional[str] = None, success_only: bool = False,
                            skip: int = 0, limit: int = 100):
    """
    Fungsi untuk mengambil daftar riwayat perhitungan, terbaru lebih dulu.
    'skip' dan 'limit' berguna untuk paginasi jika data sudah banyak.
    """
    query = db.query(models.CalculationRecord)
    if madhab:
        query = query.filter(models.CalculationRecord.madhab == madhab.strip().lower())
    if success_only:
        query = query.filter(models.CalculationRecord.success.is_(True))
    return (
        query.order_by(models.CalculationRecord.created_at.desc(), models.CalculationRecord.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


def delete_calculation_record(db: Session, record_id: int) -> bool:
    db_record = get_calculation_record(db, record_id)
    if db_record is None:
        return False
    db.delete(db_record)
    db.commit()
    return True


def get_statistics(db: Session) -> schemas.HistoryStats:
    """Ringkasan riwayat: total, tingkat keberhasilan, rata-rata durasi, per madzhab."""
    record = models.CalculationRecord
    total = db.query(func.count(record.id)).scalar() or 0
    successful = db.query(func.count(record.id)).filter(record.success.is_(True)).scalar() or 0
    average = db.query(func.avg(record.duration_ms)).scalar() or 0.0
    by_madhab = {
        madhab: count
        for madhab, count in db.query(record.madhab, func.count(record.id))
        .filter(record.madhab.isnot(None))
        .group_by(record.madhab)
        .all()
    }
    return schemas.HistoryStats(
        total=total,
        successful=successful,
        failed=total - successful,
        success_rate=successful / total if total else 0.0,
        average_duration_ms=float(average),
        by_madhab=by_madhab,
    )
