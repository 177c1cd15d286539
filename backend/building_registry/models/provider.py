"""Network provider model."""
from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from building_registry.database import Base


class Provider(Base):
    """Provider referenced by buildings."""

    __tablename__ = "providers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    technology: Mapped[str] = mapped_column(String(100), nullable=False)
    bandwidth: Mapped[int] = mapped_column(Integer, nullable=False)  # Mbps
