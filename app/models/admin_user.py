from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base
from app.utils.dates import utcnow

ROLE_ADMIN = "admin"
ROLE_EDITOR = "editor"
VALID_ROLES = (ROLE_ADMIN, ROLE_EDITOR)

# The bootstrap account can never be deleted
PROTECTED_USERNAME = "admin"


class AdminUser(Base):
    __tablename__ = "admin_users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=ROLE_EDITOR, server_default=ROLE_EDITOR)
    is_active = Column(Boolean, nullable=False, default=True, server_default="1")

    created_at = Column(DateTime, nullable=False, default=utcnow, server_default=func.now())
    last_login = Column(DateTime, nullable=True)

    sessions = relationship("Session", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<AdminUser id={self.id} username={self.username} role={self.role}>"
