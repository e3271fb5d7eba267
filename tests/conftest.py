import os

# Antes de importar la app: config lee el entorno al importarse
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["GEOJSON_SOURCE"] = ""
os.environ["SMTP_HOST"] = ""

import pytest
from fastapi.testclient import TestClient

from fintech_index.db import Base, SessionLocal, engine
from fintech_index.main import app
from fintech_index.models import CountryData, Role, User
from fintech_index.security import create_access_token, hash_password


@pytest.fixture(autouse=True)
def database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def make_user(db):
    def _make_user(email="viewer@example.com", password="secret123",
                   role=Role.VIEWER, verified=True, name="Test User"):
        user = User(email=email, name=name, password_hash=hash_password(password),
                    role=role.value, is_verified=verified)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make_user


@pytest.fixture
def headers_for():
    def _headers_for(user):
        return {"Authorization": f"Bearer {create_access_token(user)}"}
    return _headers_for


@pytest.fixture
def admin(make_user):
    return make_user(email="admin@example.com", role=Role.ADMIN, name="Admin")


@pytest.fixture
def admin_headers(admin, headers_for):
    return headers_for(admin)


@pytest.fixture
def editor_headers(make_user, headers_for):
    return headers_for(make_user(email="editor@example.com", role=Role.EDITOR))


@pytest.fixture
def viewer_headers(make_user, headers_for):
    return headers_for(make_user(email="viewer@example.com", role=Role.VIEWER))


@pytest.fixture
def nigeria_2024():
    return {"countryCode": "NG", "name": "Nigeria", "literacyRate": 62.0,
            "digitalInfrastructure": 78.5, "investment": 85.2, "finalScore": 75.2,
            "year": 2024, "population": 218000000, "gdp": 440.8, "fintechCompanies": 144}


@pytest.fixture
def seeded(db):
    rows = [
        ("NG", "Nigeria", 62.0, 78.5, 85.2, 75.2, 2024, 144),
        ("KE", "Kenya", 81.5, 75.3, 68.9, 75.2, 2024, 67),
        ("ZA", "South Africa", 94.3, 82.1, 71.8, 82.7, 2024, 89),
        ("NG", "Nigeria", 59.5, 75.2, 82.1, 72.3, 2023, 128),
        ("KE", "Kenya", 79.2, 72.1, 65.8, 72.4, 2023, 61),
    ]
    records = [
        CountryData(country_code=code, name=name, literacy_rate=lit, digital_infrastructure=dig,
                    investment=inv, final_score=score, year=year, fintech_companies=companies,
                    created_by="seed", updated_by="seed")
        for code, name, lit, dig, inv, score, year, companies in rows
    ]
    db.add_all(records)
    db.commit()
    return records
