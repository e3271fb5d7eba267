# fintech_index/models/country_data.py
from datetime import datetime

from sqlalchemy import (
    Column,
    Integer,
    BigInteger,
    String,
    Float,
    DateTime,
    UniqueConstraint,
)
from fintech_index.db import Base


class CountryData(Base):
    """
    Métricas del índice fintech de un país para un año.
    Solo puede haber un registro por (country_code, year).
    """
    __tablename__ = "country_data"
    __table_args__ = (
        UniqueConstraint("country_code", "year", name="uq_country_data_code_year"),
    )

    id = Column(Integer, primary_key=True, index=True)
    country_code = Column(String(3), nullable=False, index=True)   # ISO_A2: NG, ZA, KE...
    name = Column(String(100), nullable=False)
    literacy_rate = Column(Float, nullable=False)                  # 0-100
    digital_infrastructure = Column(Float, nullable=False)         # 0-100
    investment = Column(Float, nullable=False)                     # 0-100
    final_score = Column(Float, nullable=False)                    # 0-100
    year = Column(Integer, nullable=False, index=True)
    population = Column(BigInteger, nullable=True)
    gdp = Column(Float, nullable=True)                             # miles de millones USD
    fintech_companies = Column(Integer, nullable=True)
    created_by = Column(String(255), nullable=True)                # email del admin
    updated_by = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<CountryData(country_code={self.country_code}, year={self.year}, final_score={self.final_score})>"
