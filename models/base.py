from core.db import Base

__all__ = ["Base"]
