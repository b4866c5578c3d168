# billing/db/models/documents.py
from sqlalchemy import JSON, Column, DateTime, Index, String
import uuid

from billing.db.base import Base
from billing.db.timestamps import utcnow


class DocumentRow(Base):
    __tablename__ = "documents"

    """A schemaless document owned by one user inside a named collection.

    Invoices, customers, products and business profiles all live here as
    JSON field maps. The owner is lifted out of the payload into its own
    indexed column so per-owner queries do not scan every collection.
    """

    id = Column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    collection = Column(String(64), nullable=False)
    created_by = Column(String(128), nullable=True)

    data = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=utcnow)

    __table_args__ = (
        Index("ix_documents_collection_owner", "collection", "created_by"),
    )
