# fintech_index/models/startup.py
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime
from fintech_index.db import Base


class Startup(Base):
    __tablename__ = "startups"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    country = Column(String(100), nullable=False)
    sector = Column(String(100), nullable=False)      # Payments, Lending, Insurance...
    founded_year = Column(Integer, nullable=False)
    description = Column(String(1000), nullable=True)
    website = Column(String(255), nullable=True)
    added_by = Column(String(255), nullable=False)    # email de quien la añade
    added_at = Column(DateTime, default=datetime.utcnow)
