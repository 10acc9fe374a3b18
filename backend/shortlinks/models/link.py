from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from ..config import settings
from ..core.link_rules import utcnow, default_expiry
from ..database import Base


def _default_expires_at(context):
    created_at = context.get_current_parameters().get("created_at") or utcnow()
    return default_expiry(created_at, settings.LINK_TTL_DAYS)


class Link(Base):
    """Short link model"""
    __tablename__ = "links"

    id = Column(Integer, primary_key=True, index=True)
    # custom_slug equals short_code when set, so this index guards both
    short_code = Column(String(50), unique=True, index=True, nullable=False)
    custom_slug = Column(String(50), unique=True, nullable=True)
    original_url = Column(String(2048), nullable=False)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)
    clicks_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
    expires_at = Column(DateTime, default=_default_expires_at, nullable=True)

    # Relationships
    owner = relationship("User", back_populates="links")
    clicks = relationship(
        "Click",
        back_populates="link",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Click.id",
    )

    __table_args__ = (
        Index("idx_links_owner_created", "owner_id", "created_at"),
    )

    def __repr__(self):
        return f"<Link {self.short_code} -> {self.original_url}>"
