"""
Document database model
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Date, Enum, DateTime, ForeignKey, Index, JSON, Numeric
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.models.enums import DocType


class Document(Base):
    """
    Document model representing an evidence file attached to a box.

    Features:
    - Document type classification (tax invoice, slip, WHT certificate, ...)
    - Manually entered amount next to the AI-extracted values (JSON)
    - SHA256 checksum of the file for exact duplicate detection across the organization
    - Re-classification (doc_type change) is the only mutation after creation
    """
    __tablename__ = "documents"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    box_id = Column(String(36), ForeignKey("boxes.id", ondelete="CASCADE"), nullable=False, index=True)
    doc_type = Column(Enum(DocType), default=DocType.OTHER, nullable=False)
    filename = Column(String, nullable=True)
    checksum = Column(String(64), nullable=True, index=True)
    amount = Column(Numeric(14, 2), nullable=True)
    vat_amount = Column(Numeric(14, 2), nullable=True)
    doc_number = Column(String, nullable=True)
    doc_date = Column(Date, nullable=True)
    ai_extracted = Column(JSON, nullable=True)  # amount, vat_amount, tax_id, vendor_name
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    box = relationship("Box", back_populates="documents")

    __table_args__ = (
        Index('idx_document_box_type', 'box_id', 'doc_type'),
    )

    def __repr__(self):
        return f"<Document(id={self.id}, doc_type={self.doc_type.value})>"
