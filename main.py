# Di dalam file: main.py

import logging
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session

import calculator
import crud
import models
import schemas
from config import get_settings
from database import SessionLocal, engine
from mirath.cache import CalculationCache, cached
from mirath.errors import UnknownMadhab
from mirath.rules.fiqh import all_rule_sets, rule_set_for

settings = get_settings()
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

# Membuat tabel di database (jika belum ada)
models.Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Kalkulator Mawarits Empat Madzhab",
    description="API untuk perhitungan waris Islam menurut madzhab Hanafi, Maliki, Syafi'i dan Hanbali.",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

calculation_cache = CalculationCache(max_size=settings.cache_size)
calculate = cached(calculation_cache)(calculator.calculate_inheritance)


# --- Dependency untuk Sesi Database ---
# Ini adalah cara standar FastAPI untuk mengelola koneksi database per permintaan
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
# -----------------------------------------


@app.get("/")
def read_root():
    """
    Endpoint utama untuk menyapa pengguna.
    """
    return {"message": "Selamat datang di Kalkulator Mawarits Empat Madzhab"}


@app.get("/madhabs", response_model=List[schemas.MadhabInfo])
def read_madhabs():
    """
    Daftar madzhab yang didukung beserta versi aturannya.
    """
    return [
        schemas.MadhabInfo(code=rs.madhab, name=rs.name, version=rs.version, description=rs.description)
        for rs in all_rule_sets()
    ]


@app.get("/madhabs/{code}", response_model=schemas.MadhhabRuleSet)
def read_madhab_rules(code: str):
    """
    Aturan lengkap satu madzhab (termasuk tabel hijab).
    """
    try:
        return rule_set_for(code)
    except UnknownMadhab as exc:
        raise HTTPException(status_code=404, detail=exc.message)


@app.post("/calculate", response_model=schemas.CalculationResult)
def run_calculation(calculation_data: schemas.CalculationInput, response: Response,
                    db: Session = Depends(get_db)):
    """
    Endpoint untuk menjalankan perhitungan. Hasil dicatat ke riwayat;
    input yang tidak sah dikembalikan dengan status 422.
    """
    result = calculate(calculation_data)
    crud.create_calculation_record(db, calculation_data, result)
    if not result.success:
        response.status_code = 422
    return result


@app.get("/history", response_model=List[schemas.CalculationRecord])
def read_history(madhab: Optional[str] = None, success_only: bool = False,
                 skip: int = 0, limit: int = 100, db: Session = Depends(get_db)):
    """
    Endpoint untuk membaca riwayat perhitungan.
    """
    return crud.get_calculation_records(db, madhab=madhab, success_only=success_only,
                                        skip=skip, limit=limit)


@app.get("/history/stats", response_model=schemas.HistoryStats)
def read_history_stats(db: Session = Depends(get_db)):
    return crud.get_statistics(db)


@app.get("/history/{record_id}", response_model=schemas.CalculationRecord)
def read_history_record(record_id: int, db: Session = Depends(get_db)):
    db_record = crud.get_calculation_record(db, record_id)
    if db_record is None:
        raise HTTPException(status_code=404, detail="Riwayat perhitungan tidak ditemukan")
    return db_record


@app.delete("/history/{record_id}", status_code=204)
def delete_history_record(record_id: int, db: Session = Depends(get_db)):
    if not crud.delete_calculation_record(db, record_id):
        raise HTTPException(status_code=404, detail="Riwayat perhitungan tidak ditemukan")
    return Response(status_code=204)


@app.get("/cache/stats")
def read_cache_stats():
    return calculation_cache.stats()


@app.delete("/cache", status_code=204)
def clear_cache():
    calculation_cache.clear()
    logger.info("Cache perhitungan dikosongkan")
    return Response(status_code=204)
