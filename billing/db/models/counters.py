# billing/db/models/counters.py
from sqlalchemy import BigInteger, Column, DateTime, String

from billing.db.base import Base
from billing.db.timestamps import utcnow


class CounterRow(Base):
    __tablename__ = "counters"

    """A named monotonic counter, e.g. the invoice sequence of one owner.

    Counters are only ever changed through a single UPDATE ... SET value =
    value + n statement so concurrent writers cannot read the same value.
    """

    name = Column(String(191), primary_key=True)
    value = Column(BigInteger, nullable=False, default=0)

    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
