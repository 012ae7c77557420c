# backend/benchboard/schemas.py
"""
Pydantic models for request bodies and matching results.
Field names are camelCase to match the JSON the dashboard sends and receives.
"""

from __future__ import annotations

from datetime import date
from typing import Annotated, Any, Dict, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, model_validator


class _In(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)


def _not_blank(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


# stripped, non-empty text for NOT NULL columns
RequiredText = Annotated[str, AfterValidator(_not_blank)]


# --- persistence payloads ------------------------------------------------------

class ResourceIn(_In):
    vamid: RequiredText = Field(min_length=1)
    name: RequiredText = Field(min_length=1)
    joiningDate: date
    grade: Optional[str] = None
    currentSkill: Optional[str] = None
    primarySkill: Optional[str] = None
    totalExp: Optional[int] = None


class FullResourceIn(ResourceIn):
    tsc: Optional[str] = None
    account: Optional[str] = None
    project: Optional[str] = None
    allocationStatus: Optional[str] = None
    allocationStartDate: Optional[date] = None
    allocationEndDate: Optional[date] = None
    firstLevelManager: Optional[str] = None
    designation: Optional[str] = None
    email: Optional[str] = None
    subDept: Optional[str] = None
    relievingDate: Optional[date] = None
    resignedOn: Optional[date] = None
    resignationStatus: Optional[str] = None
    secondLevelManager: Optional[str] = None
    vamExp: Optional[int] = None
    accountSummary: Optional[str] = None
    resourcingUnit: Optional[str] = None
    workspace: Optional[str] = None


class ResourcePatch(_In):
    """Every field optional; only fields sent are written. Required columns may be omitted but not nulled."""
    name: RequiredText = None
    joiningDate: date = None
    grade: Optional[str] = None
    currentSkill: Optional[str] = None
    primarySkill: Optional[str] = None
    totalExp: Optional[int] = None
    account: Optional[str] = None
    project: Optional[str] = None
    allocationStatus: Optional[str] = None
    designation: Optional[str] = None
    email: Optional[str] = None
    workspace: Optional[str] = None


class BenchResourcesRequest(_In):
    resources: List[FullResourceIn] = Field(min_length=1)


class RRFIn(_In):
    rrfId: RequiredText = Field(min_length=1)
    posTitle: Optional[str] = None
    role: Optional[str] = None
    account: Optional[str] = None
    project: Optional[str] = None
    description: Optional[str] = None
    skillsRequired: Optional[str] = None
    experienceRequired: Optional[int] = None
    grade: Optional[str] = None
    location: Optional[str] = None
    status: Optional[str] = "open"


class RRFsRequest(_In):
    rrfs: List[RRFIn] = Field(min_length=1)


class ExcelUploadIn(_In):
    fileName: str = Field(min_length=1)
    fileSize: Optional[int] = None
    uploadedBy: Optional[str] = None
    rowsProcessed: Optional[int] = None
    status: Optional[str] = "completed"
    fileType: Optional[str] = None


# --- matching results ------------------------------------------------------------

class CandidateRef(_In):
    name: str
    vamid: str


class CandidateMatch(_In):
    candidate: CandidateRef
    suitabilityScore: float = Field(ge=0, le=100)
    justification: str


class RRFMatch(_In):
    rrfId: str
    candidates: List[CandidateMatch] = Field(default_factory=list)

    @model_validator(mode="after")
    def _sort_candidates(self) -> "RRFMatch":
        # best first; sorted() is stable so equal scores keep model order
        self.candidates = sorted(self.candidates, key=lambda c: c.suitabilityScore, reverse=True)
        return self


class MatchSummary(_In):
    summary: str


class DedupResult(_In):
    newResourceIds: List[str] = Field(default_factory=list)


# --- matching requests ------------------------------------------------------------

class BestCandidateRequest(_In):
    rrf: Dict[str, Any]
    bench: List[Dict[str, Any]] = Field(min_length=1)


class MatchRRFsRequest(_In):
    rrfs: List[Dict[str, Any]] = Field(min_length=1)
    bench: Optional[List[Dict[str, Any]]] = None
    summarize: bool = True


class SummaryRequest(_In):
    results: List[Dict[str, Any]]


class ColumnMappingRequest(_In):
    excelColumns: List[str] = Field(min_length=1)
    dataFields: List[str] = Field(min_length=1)


class DeduplicateRequest(_In):
    rows: List[Dict[str, Any]] = Field(min_length=1)
    previousResourceIds: Optional[List[str]] = None
