"""
SQLAlchemy-backed user store.
"""
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .errors import Conflict
from .models import User

logger = logging.getLogger(__name__)


class UserStore:
    def __init__(self, db: Session):
        self.db = db

    def find_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def find_by_id(self, user_id: str) -> Optional[User]:
        return self.db.get(User, user_id)

    def create(self, email: str, password_hash: str, name: Optional[str] = None) -> User:
        """
        Insert a new user row.

        Raises:
            Conflict: if the unique email index rejects the row, which is how
                a concurrent signup for the same address surfaces.
        """
        user = User(email=email, password_hash=password_hash, name=name)
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            logger.info("Signup rejected by unique email constraint: email=%s", email)
            raise Conflict() from exc
        self.db.refresh(user)
        return user

    def update_password(self, user: User, password_hash: str) -> User:
        user.password_hash = password_hash
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user
