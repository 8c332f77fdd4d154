from sqlalchemy import Column, Integer, String, Text, Table, ForeignKey
from sqlalchemy.orm import relationship
from .base import Base

# 에러 로그 화면/삭제 권한
ADMIN_ROLE = "admin"

BUILTIN_ROLES = {
    ADMIN_ROLE: "Can view and clear JS error logs",
}

user_role = Table(
    'user_role', Base.metadata,
    Column('user_id', Integer, ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
    Column('role_id', Integer, ForeignKey('roles.id', ondelete='CASCADE'), primary_key=True),
)


class Role(Base):
    __tablename__ = 'roles'
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    users = relationship('User', secondary=user_role, back_populates='roles')

    def __repr__(self):
        return f"<Role {self.name}>"
