from sqlalchemy import Boolean, Column, Integer, String, DateTime, func, true
from sqlalchemy.orm import relationship
from .base import Base
from .role import ADMIN_ROLE, user_role


class User(Base):
    """Account that signs in to the error log screens."""
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(120), unique=True, nullable=False, index=True)
    hashed_password = Column(String(128), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())
    created_at = Column(DateTime, server_default=func.now())
    roles = relationship('Role', secondary=user_role, back_populates='users')

    @property
    def role_names(self):
        return [r.name for r in self.roles]

    @property
    def is_admin(self) -> bool:
        return ADMIN_ROLE in self.role_names

    def __repr__(self):
        return f"<User {self.username} active={self.is_active}>"
