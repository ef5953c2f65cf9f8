from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from autop.database import Base

class ConversionHistory(Base):
    """One row per auto-paragraph conversion served by the API."""
    __tablename__ = "conversion_history"

    id = Column(Integer, primary_key=True, index=True)
    file_id = Column(String, unique=True, index=True)
    original_filename = Column(String, nullable=True)
    output_filename = Column(String, nullable=True)
    input_size = Column(Integer)
    output_size = Column(Integer, nullable=True)
    br = Column(Boolean, default=False)
    esc_pre = Column(Boolean, default=False)
    remove_useless_newlines_in_pre = Column(Boolean, default=False)
    engine = Column(String, default="re")
    conversion_time = Column(DateTime(timezone=True), server_default=func.now())
    status = Column(String, default="completed")
    error_message = Column(Text, nullable=True)

    def to_dict(self) -> dict:
        return {
            "file_id": self.file_id,
            "original_filename": self.original_filename,
            "output_filename": self.output_filename,
            "input_size": self.input_size,
            "output_size": self.output_size,
            "options": {
                "br": self.br,
                "esc_pre": self.esc_pre,
                "remove_useless_newlines_in_pre": self.remove_useless_newlines_in_pre,
            },
            "engine": self.engine,
            "conversion_time": self.conversion_time.isoformat() if self.conversion_time else None,
            "status": self.status,
            "error_message": self.error_message,
        }
