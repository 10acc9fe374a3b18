from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from ..core.link_rules import utcnow
from ..database import Base


class Click(Base):
    """Click event; rows are only ever inserted"""
    __tablename__ = "clicks"

    id = Column(Integer, primary_key=True, index=True)
    link_id = Column(Integer, ForeignKey("links.id", ondelete="CASCADE"), nullable=False, index=True)
    clicked_at = Column(DateTime, default=utcnow, nullable=False)
    ip_address = Column(String(45), nullable=False, default="unknown")  # IPv4 or IPv6
    user_agent = Column(String(512), nullable=False, default="unknown")
    referrer = Column(String(512), nullable=False, default="")

    # Relationship with link
    link = relationship("Link", back_populates="clicks")

    def __repr__(self):
        return f"<Click {self.id} for link {self.link_id}>"
