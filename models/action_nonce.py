from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from .base import Base


class ActionNonce(Base):
    """관리자 화면 렌더링마다 발급되는 1회용 토큰 (사용 시 삭제)."""
    __tablename__ = 'action_nonces'
    token = Column(String(64), primary_key=True)
    action = Column(String(50), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False)

    def __repr__(self):
        return f"<ActionNonce(action='{self.action}', user_id={self.user_id})>"
