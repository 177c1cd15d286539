"""Building model with territorial codes and snapshot names."""
import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer, String, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from building_registry.database import Base


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class BuildingStatus(str, enum.Enum):
    ACTIVE = "active"
    DELETED = "deleted"


class Building(Base):
    """Building record.

    The ``*_name`` columns are copies of the dictionary names taken when the
    matching code was written; renaming a dictionary entry later does not
    touch them. The PostGIS ``location`` column is generated by the database
    from longitude/latitude and is not mapped here.
    """

    __tablename__ = "buildings"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )

    # Territorial codes
    region_code: Mapped[str] = mapped_column(
        String(2), ForeignKey("regions.code", ondelete="RESTRICT"), nullable=False, index=True
    )
    district_code: Mapped[str] = mapped_column(
        String(4), ForeignKey("districts.code", ondelete="RESTRICT"), nullable=False, index=True
    )
    community_code: Mapped[str] = mapped_column(
        String(7), ForeignKey("communities.code", ondelete="RESTRICT"), nullable=False, index=True
    )
    city_code: Mapped[str] = mapped_column(
        String(7), ForeignKey("cities.code", ondelete="RESTRICT"), nullable=False, index=True
    )
    city_subdivision_code: Mapped[str | None] = mapped_column(
        String(7), ForeignKey("city_subdivisions.code", ondelete="RESTRICT"), nullable=True
    )
    street_code: Mapped[str | None] = mapped_column(
        String(20), ForeignKey("streets.code", ondelete="RESTRICT"), nullable=True
    )

    # Snapshot names
    region_name: Mapped[str] = mapped_column(String(100), nullable=False)
    district_name: Mapped[str] = mapped_column(String(100), nullable=False)
    community_name: Mapped[str] = mapped_column(String(100), nullable=False)
    city_name: Mapped[str] = mapped_column(String(100), nullable=False)
    city_subdivision_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    street_name: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Address detail
    building_number: Mapped[str] = mapped_column(String(20), nullable=False)
    post_code: Mapped[str] = mapped_column(String(6), nullable=False)

    # WGS84 coordinates
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)

    provider_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("providers.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=BuildingStatus.ACTIVE.value, index=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    created_by: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )
    updated_by: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)


ACTIVE_ADDRESS_INDEX = "uq_buildings_active_address"

# Absent optional codes compare equal, so two buildings without a street clash.
Index(
    ACTIVE_ADDRESS_INDEX,
    Building.region_code,
    Building.district_code,
    Building.community_code,
    Building.city_code,
    func.coalesce(Building.city_subdivision_code, ""),
    func.coalesce(Building.street_code, ""),
    Building.building_number,
    unique=True,
    postgresql_where=Building.status == BuildingStatus.ACTIVE.value,
    sqlite_where=Building.status == BuildingStatus.ACTIVE.value,
)
