import uuid
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, UniqueConstraint, CheckConstraint, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.db.base import Base


class UserPin(Base):
    __tablename__ = "user_pins"
    __table_args__ = (
        UniqueConstraint("user_id", "business_id", name="uq_user_pins_user_business"),
        CheckConstraint("status IN ('favorite', 'want_to_try')", name="ck_user_pins_status"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    business_id = Column(String, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(16), nullable=False, default="want_to_try")  # favorite | want_to_try
    user_notes = Column(Text, nullable=True)
    user_image_url = Column(String, nullable=True)  # overrides the business photo on the board
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    user = relationship("Profile", back_populates="pins")
    business = relationship("Business", back_populates="pins")
