"""
Database Models - Region Hierarchy and DADD Records

Reference tables form a four level hierarchy:

    REGION -> SUB_REGION -> INTERMEDIATE_REGION -> COUNTRY

Fact table:
- DADD_RECORD: one metric value per country and decade (value may be NULL)

Table and column names match the existing MySQL schema.
"""

from typing import Optional

from sqlalchemy import Float, ForeignKey, Index, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


# =============================================================================
# REFERENCE TABLES
# =============================================================================

class Region(Base):
    """Top level geographic region (e.g. Africa, Europe)."""
    __tablename__ = "REGION"

    region_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    region_name: Mapped[str] = mapped_column(String(100), nullable=False)


class SubRegion(Base):
    """Sub-region of a region. The parent region is optional."""
    __tablename__ = "SUB_REGION"

    sub_region_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sub_region_name: Mapped[str] = mapped_column(String(100), nullable=False)
    region_id: Mapped[Optional[int]] = mapped_column(ForeignKey("REGION.region_id"))

    __table_args__ = (
        Index("ix_sub_region_region", "region_id"),
    )


class IntermediateRegion(Base):
    """Intermediate region between a sub-region and its countries."""
    __tablename__ = "INTERMEDIATE_REGION"

    intermediate_region_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    intermediate_region_name: Mapped[Optional[str]] = mapped_column(String(100))
    sub_region_id: Mapped[int] = mapped_column(ForeignKey("SUB_REGION.sub_region_id"), nullable=False)

    __table_args__ = (
        Index("ix_intermediate_region_sub_region", "sub_region_id"),
    )


class Country(Base):
    """Country, classified under an intermediate region."""
    __tablename__ = "COUNTRY"

    country_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    country_name: Mapped[str] = mapped_column(String(150), nullable=False)
    intermediate_region_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("INTERMEDIATE_REGION.intermediate_region_id")
    )

    __table_args__ = (
        Index("ix_country_name", "country_name"),
        Index("ix_country_intermediate_region", "intermediate_region_id"),
    )


# =============================================================================
# FACT TABLES
# =============================================================================

class DaddRecord(Base):
    """
    DADD Fact Table

    One row per (country, decade). Read-only from the web application.
    """
    __tablename__ = "DADD_RECORD"

    country_id: Mapped[int] = mapped_column(ForeignKey("COUNTRY.country_id"), primary_key=True)
    decade_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    dadd_value: Mapped[Optional[float]] = mapped_column(Float)

    __table_args__ = (
        Index("ix_dadd_record_decade", "decade_id"),
    )
