# src/store/models/ops/offer_info.py
from sqlalchemy import Column, Date, DateTime, Integer, Numeric, String, Text, Boolean, JSON
from sqlalchemy.sql import func
from src.store.utils.database import Base


class OfferInfo(Base):
    __tablename__ = 'offers'

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    code = Column(String(40), nullable=True, unique=True)
    discount_percent = Column(Numeric(5, 2), nullable=False, default=0)
    image = Column(String(500), nullable=True)
    product_ids = Column(JSON, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    created_dt = Column(DateTime(timezone=True), default=func.now(), nullable=False)
    updated_dt = Column(DateTime(timezone=True), default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<OfferInfo {self.id} {self.title}>"
