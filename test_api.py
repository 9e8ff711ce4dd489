# Di dalam file: test_api.py

import os

os.environ.setdefault("MIRATH_DATABASE_URL", "sqlite://")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import main  # noqa: E402
import models  # noqa: E402

# Database SQLite di memori, satu koneksi untuk seluruh tes
engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    models.Base.metadata.create_all(bind=engine)
    main.app.dependency_overrides[main.get_db] = override_get_db
    main.calculation_cache.clear()
    with TestClient(main.app) as c:
        yield c
    main.app.dependency_overrides.clear()
    models.Base.metadata.drop_all(bind=engine)


def payload(heirs, madhab="shafii", total="120000", **estate):
    return {"madhab": madhab, "estate": {"total": total, **estate}, "heirs": heirs}


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "Mawarits" in response.json()["message"]


def test_daftar_madzhab(client):
    response = client.get("/madhabs")
    assert response.status_code == 200
    codes = [m["code"] for m in response.json()]
    assert codes == ["hanafi", "maliki", "shafii", "hanbali"]


def test_aturan_satu_madzhab(client):
    response = client.get("/madhabs/hanbali")
    assert response.status_code == 200
    body = response.json()
    assert body["madhab"] == "hanbali"
    assert body["grandfather_with_siblings"] == "share"
    assert len(body["hijab_rules"]) > 0

    assert client.get("/madhabs/zahiri").status_code == 404


def test_hitung_skenario_suami_dan_anak(client):
    response = client.post("/calculate", json=payload({"husband": 1, "son": 1}))
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["madhab"] == "shafii"
    shares = {s["heir"]: s for s in body["shares"]}
    assert shares["husband"]["fraction"] == "1/4"
    assert shares["son"]["fraction"] == "3/4"
    assert shares["husband"]["amount"] == "30000.00"
    assert shares["son"]["amount"] == "90000.00"
    assert body["steps"][0]["step_number"] == 1


def test_hitung_input_tidak_sah(client):
    response = client.post("/calculate", json=payload({"son": 1}, total="0"))
    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["error_code"] == "NonPositiveEstate"


def test_body_tidak_lengkap_ditolak_fastapi(client):
    response = client.post("/calculate", json={"madhab": "shafii"})
    assert response.status_code == 422
    assert "detail" in response.json()


def test_riwayat_dan_statistik(client):
    client.post("/calculate", json=payload({"husband": 1, "son": 1}))
    client.post("/calculate", json=payload({"daughter": 1}, madhab="hanafi"))
    client.post("/calculate", json=payload({"cousin": 1}))

    history = client.get("/history").json()
    assert len(history) == 3
    assert {r["success"] for r in history} == {True, False}

    only_ok = client.get("/history", params={"success_only": True}).json()
    assert len(only_ok) == 2

    hanafi = client.get("/history", params={"madhab": "Hanafi"}).json()
    assert len(hanafi) == 1
    assert hanafi[0]["result"]["radd_applied"] is True
    assert hanafi[0]["input_snapshot"]["heirs"] == {"daughter": 1}

    stats = client.get("/history/stats").json()
    assert stats["total"] == 3
    assert stats["successful"] == 2
    assert stats["failed"] == 1
    assert stats["by_madhab"] == {"hanafi": 1, "shafii": 2}
    assert stats["success_rate"] == pytest.approx(2 / 3)


def test_baca_dan_hapus_riwayat(client):
    client.post("/calculate", json=payload({"husband": 1, "son": 1}))
    record_id = client.get("/history").json()[0]["id"]

    response = client.get(f"/history/{record_id}")
    assert response.status_code == 200
    assert response.json()["madhab"] == "shafii"

    assert client.delete(f"/history/{record_id}").status_code == 204
    assert client.get(f"/history/{record_id}").status_code == 404
    assert client.delete(f"/history/{record_id}").status_code == 404


def test_cache_endpoint(client):
    body = payload({"wife": 1, "mother": 1, "full_sister": 2})
    client.post("/calculate", json=body)
    client.post("/calculate", json=body)

    stats = client.get("/cache/stats").json()
    assert stats["hits"] == 1
    assert stats["size"] == 1

    assert client.delete("/cache").status_code == 204
    assert client.get("/cache/stats").json()["size"] == 0
