"""Territorial dictionary models (TERYT-style hierarchy)."""
from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from building_registry.database import Base


class Region(Base):
    """Top level of the hierarchy (2-digit code)."""

    __tablename__ = "regions"

    code: Mapped[str] = mapped_column(String(2), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)


class District(Base):
    """District (4-digit code) belonging to a region."""

    __tablename__ = "districts"

    code: Mapped[str] = mapped_column(String(4), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    region_code: Mapped[str] = mapped_column(
        String(2), ForeignKey("regions.code", ondelete="RESTRICT"), nullable=False, index=True
    )


class Community(Base):
    """Community (7-digit code) belonging to a district."""

    __tablename__ = "communities"

    code: Mapped[str] = mapped_column(String(7), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    district_code: Mapped[str] = mapped_column(
        String(4), ForeignKey("districts.code", ondelete="RESTRICT"), nullable=False, index=True
    )


class City(Base):
    """City or locality (7-digit code) belonging to a community."""

    __tablename__ = "cities"

    code: Mapped[str] = mapped_column(String(7), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    community_code: Mapped[str] = mapped_column(
        String(7), ForeignKey("communities.code", ondelete="RESTRICT"), nullable=False, index=True
    )


class CitySubdivision(Base):
    """Part of a city (7-digit code)."""

    __tablename__ = "city_subdivisions"

    code: Mapped[str] = mapped_column(String(7), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    city_code: Mapped[str] = mapped_column(
        String(7), ForeignKey("cities.code", ondelete="RESTRICT"), nullable=False, index=True
    )


class Street(Base):
    """Street; codes are free-form and streets carry no parent."""

    __tablename__ = "streets"

    code: Mapped[str] = mapped_column(String(20), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
