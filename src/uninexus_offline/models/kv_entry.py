"""SQLAlchemy model backing the durable key-value store."""

from sqlalchemy import Text
from sqlalchemy.orm import Mapped, mapped_column

from uninexus_offline.db.session import Base


class KeyValueEntry(Base):
    """A single namespaced key holding a JSON-serialized value."""

    __tablename__ = "offline_kv_entry"

    key: Mapped[str] = mapped_column(Text, primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
