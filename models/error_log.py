from sqlalchemy import Column, BigInteger, Integer, String, Text, DateTime
from .base import Base

# SQLite는 INTEGER PRIMARY KEY 여야 AUTOINCREMENT(id 재사용 금지) 적용됨
ErrorLogId = BigInteger().with_variant(Integer, "sqlite")


class JsErrorLog(Base):
    __tablename__ = 'js_error_logs'
    __table_args__ = {'sqlite_autoincrement': True}

    id = Column(ErrorLogId, primary_key=True, autoincrement=True)
    timestamp = Column(DateTime, nullable=False)
    message = Column(Text, nullable=False, default="")
    source = Column(Text, nullable=False, default="")
    lineno = Column(Integer, nullable=False, default=0)
    colno = Column(Integer, nullable=False, default=0)
    stack = Column(Text, nullable=False, default="")
    user_agent = Column(Text, nullable=False, default="")
    ip_address = Column(String(100), nullable=False, default="")

    def __repr__(self):
        return f"<JsErrorLog(id={self.id}, source='{self.source}', lineno={self.lineno})>"
