# src/store/models/ops/banner_info.py
from sqlalchemy import Column, Date, DateTime, Integer, String, Text, Boolean, JSON
from sqlalchemy.sql import func
from src.store.utils.database import Base


class BannerInfo(Base):
    __tablename__ = 'banners'

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    subtitle = Column(String(300), nullable=True)
    description = Column(Text, nullable=True)
    image = Column(String(500), nullable=False)
    badge = Column(String(64), nullable=True)
    link = Column(String(300), nullable=True)
    button_text = Column(String(64), nullable=True)
    features = Column(JSON, nullable=True)

    # "order" is reserved in SQL
    order = Column("sort_order", Integer, nullable=False, default=0, server_default="0")
    is_active = Column(Boolean, nullable=False, default=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)

    created_by = Column(String(50), nullable=True)
    created_dt = Column(DateTime(timezone=True), default=func.now(), nullable=False)
    updated_by = Column(String(50), nullable=True)
    updated_dt = Column(DateTime(timezone=True), default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<BannerInfo {self.id} {self.title}>"
