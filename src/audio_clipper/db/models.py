"""SQLAlchemy ORM models."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class SourceItemModel(Base):
    """Source item (remote video or uploaded audio) ORM model."""

    __tablename__ = "source_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    origin: Mapped[str] = mapped_column(String(20), nullable=False)
    remote_reference: Mapped[str | None] = mapped_column(Text, nullable=True, index=True)
    local_path: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    thumbnail: Mapped[str | None] = mapped_column(Text, nullable=True)
    channel: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(20), server_default="pending")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    jobs: Mapped[list["JobModel"]] = relationship("JobModel", back_populates="source")


class JobModel(Base):
    """Processing job ORM model."""

    __tablename__ = "jobs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    source_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("source_items.id"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(String(20), server_default="pending", index=True)
    progress: Mapped[int] = mapped_column(Integer, server_default="0")
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    source: Mapped["SourceItemModel"] = relationship("SourceItemModel", back_populates="jobs")
    selections: Mapped[list["SelectionModel"]] = relationship(
        "SelectionModel", back_populates="job", order_by="SelectionModel.position"
    )


class SelectionModel(Base):
    """Requested time range and its clip ORM model."""

    __tablename__ = "selections"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    source_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("source_items.id"), nullable=False, index=True
    )
    job_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("jobs.id"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    start_time: Mapped[int] = mapped_column(Integer, nullable=False)
    end_time: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    filename: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(20), server_default="pending", index=True)
    file_path: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    file_size: Mapped[int | None] = mapped_column(Integer, nullable=True)

    job: Mapped["JobModel"] = relationship("JobModel", back_populates="selections")


class AuthHandshakeModel(Base):
    """Pending remote storage authorization ORM model."""

    __tablename__ = "auth_handshakes"

    token: Mapped[str] = mapped_column(String(64), primary_key=True)
    selection_id: Mapped[str] = mapped_column(String(36), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
