"""Cleaning worker message and report schemas."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Union

from pydantic import BaseModel, Field


class NormalizationEdit(BaseModel):
    id: str
    field: str
    old_value: str
    new_value: str


class CleaningStats(BaseModel):
    total_scanned: int = Field(..., ge=0)
    normalized: int = Field(..., ge=0)
    duplicates_found: int = Field(..., ge=0, description="Records implicated in duplicate groups.")


class CleaningReport(BaseModel):
    stats: CleaningStats
    duplicate_groups: List[List[str]] = Field(default_factory=list)
    normalized_records: List[NormalizationEdit] = Field(default_factory=list)


class StartCleaningMessage(BaseModel):
    type: Literal["START_CLEANING"] = "START_CLEANING"
    data: List[Dict[str, Any]] = Field(default_factory=list)


class ProgressMessage(BaseModel):
    type: Literal["PROGRESS"] = "PROGRESS"
    progress: int = Field(..., ge=0, le=100)


class CompleteMessage(BaseModel):
    type: Literal["COMPLETE"] = "COMPLETE"
    report: CleaningReport


class ErrorMessage(BaseModel):
    type: Literal["ERROR"] = "ERROR"
    detail: str


WorkerMessage = Union[ProgressMessage, CompleteMessage, ErrorMessage]
