from sqlalchemy import Column, Integer, String, DateTime, Boolean
from sqlalchemy.orm import relationship
from ..core.link_rules import utcnow
from ..database import Base


class User(Base):
    """Account that owns short links"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationship with links
    links = relationship("Link", back_populates="owner", cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self):
        return f"<User {self.email}>"
