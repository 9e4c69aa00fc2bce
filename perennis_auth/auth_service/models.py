from sqlalchemy import Column, String, DateTime
from datetime import datetime, timezone
from .db import Base
import uuid


def _utcnow():
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    # Stored lower-cased and trimmed; uniqueness enforced by the index
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    name = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    def to_public(self) -> dict:
        """Fields safe to return to clients."""
        return {"id": self.id, "email": self.email, "name": self.name}
