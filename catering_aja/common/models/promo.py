from sqlalchemy import Boolean, Column, Date, Integer, Numeric, String, Text
from .base import Base


class Promo(Base):
    __tablename__ = "promos"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    code = Column(String(64), nullable=False, unique=True)
    discount_type = Column(String(16), nullable=False)  # percent | amount
    discount_value = Column(Numeric(10, 2), nullable=False)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
