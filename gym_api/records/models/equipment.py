from sqlalchemy import Boolean, Column, Integer, String

from gym_api.database import Base


class Equipment(Base):
    __tablename__ = "equipment"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    category = Column(String, nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
