import enum

from sqlalchemy import Column, Integer, String, DateTime, Enum as SAEnum, func
from app.core.database import Base


class UserRole(str, enum.Enum):
    penanya = "penanya"
    penjawab = "penjawab"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    role = Column(SAEnum(UserRole, name="user_role"), nullable=False, comment="作成後は変更不可")
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())
