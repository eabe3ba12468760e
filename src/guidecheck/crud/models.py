"""Database table definitions for recorded check runs and per-file results"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, DateTime, Text


class CheckRun(SQLModel, table=True):
    """One invocation of the check pipeline"""
    __tablename__ = "check_runs"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    started_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
    exit_code: int = Field(..., nullable=False, description="Aggregate exit code (first failure wins)")
    total: int = Field(default=0, nullable=False)
    failed: int = Field(default=0, nullable=False)


class FileResultRow(SQLModel, table=True):
    """Doctest outcome of a single guide file within a run"""
    __tablename__ = "file_results"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    run_id: UUID = Field(..., foreign_key="check_runs.id", index=True, nullable=False)
    position: int = Field(..., nullable=False, description="Order in which the file was tested")
    path: str = Field(..., sa_column=Column(Text, nullable=False))
    version: str = Field(..., index=True, nullable=False)
    code: int = Field(..., nullable=False)
    duration: float = Field(default=0.0, nullable=False)
