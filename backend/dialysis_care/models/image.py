from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from dialysis_care.database import Base


class Image(Base):
    __tablename__ = "images"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("sessions.id"), nullable=False, index=True)
    uploaded_by = Column(String(20), nullable=False)  # "doctor" | "patient"
    uploader_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    image_url = Column(String(1000), nullable=False)
    public_id = Column(String(500), nullable=False)
    type = Column(String(50), default="general")
    uploaded_at = Column(DateTime(timezone=True), server_default=func.now())
