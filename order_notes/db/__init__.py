from .base import Base
from .session import engine, SessionLocal

# Export for convenience
__all__ = ["Base", "engine", "SessionLocal"]
