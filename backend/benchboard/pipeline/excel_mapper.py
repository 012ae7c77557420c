# backend/benchboard/pipeline/excel_mapper.py
"""
Spreadsheet row -> canonical record.

Header spellings vary from sheet to sheet, so every canonical field has an
ordered list of accepted headers. The first header holding a non-blank value
wins. Records come out camelCase, with dates as YYYY-MM-DD strings and
numeric fields as int (or None), ready for db.crud's bulk writers.

Public:
  RESOURCE_ALIASES, RRF_ALIASES
  map_resource_row(row) / map_rrf_row(row) / map_row(row, kind)
  map_rows(rows, kind) -> MappingReport
  resolve(row, aliases)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Literal, Mapping, Optional

from ..core.utils import iso_date, is_blank, to_int, to_text

logger = logging.getLogger(__name__)

RecordKind = Literal["resource", "rrf"]
RECORD_KINDS = ("resource", "rrf")

# canonical field -> accepted headers, in priority order
RESOURCE_ALIASES: Dict[str, List[str]] = {
    "vamid": ["VAMID", "VAM ID", "VAM_ID"],
    "name": ["Name", "Full Name", "FullName"],
    "joiningDate": ["Joining Date", "JoiningDate", "Joining_Date", "Date of Joining"],
    "grade": ["Grade", "Level"],
    "currentSkill": ["Current Skill", "CurrentSkill", "Current_Skill", "Skill"],
    "primarySkill": ["Primary Skill", "PrimarySkill", "Primary_Skill"],
    "totalExp": ["Total Exp", "TotalExp", "Total_Exp", "Experience"],
    "tsc": ["TSC"],
    "account": ["Account", "Account Name", "AccountName"],
    "project": ["Project", "Project Name"],
    "allocationStatus": ["Allocation Status", "AllocationStatus", "Allocation_Status", "Status"],
    "allocationStartDate": ["Allocation Start Date", "AllocationStartDate", "Allocation_Start_Date"],
    "allocationEndDate": ["Allocation End Date", "AllocationEndDate", "Allocation_End_Date"],
    "firstLevelManager": ["First Level Manager", "FirstLevelManager", "First_Level_Manager", "Manager"],
    "designation": ["Designation", "Title"],
    "email": ["Email", "Email ID", "EmailID"],
    "subDept": ["Sub dept", "SubDept", "Sub_Dept", "Department"],
    "relievingDate": ["Relieving Date", "RelievingDate", "Relieving_Date"],
    "resignedOn": ["Resigned on", "ResignedOn", "Resigned_On", "Resignation Date"],
    "resignationStatus": ["Resignation Status", "ResignationStatus", "Resignation_Status"],
    "secondLevelManager": ["Second Level Manager", "SecondLevelManager", "Second_Level_Manager"],
    "vamExp": ["VAM Exp", "VAMExp", "VAM_Exp"],
    "accountSummary": ["Account Summary", "AccountSummary", "Account_Summary"],
    "resourcingUnit": ["Resourcing unit", "ResourcingUnit", "Resourcing_Unit", "Unit"],
    "workspace": ["Workspace", "Work Location"],
}

RRF_ALIASES: Dict[str, List[str]] = {
    "rrfId": ["RRF ID", "RRFID", "RRF_ID"],
    "posTitle": ["POS Title", "POSTitle", "POS_Title", "Position Title"],
    "role": ["Role", "Role Name"],
    "account": ["Account", "Account Name", "AccountName"],
    "project": ["Project", "Project Name"],
    "description": ["Description", "Job Description"],
    "skillsRequired": ["Skills Required", "SkillsRequired", "Required Skills", "Skill"],
    "experienceRequired": ["Experience Required", "ExperienceRequired"],
    "grade": ["Grade", "Level"],
    "location": ["Location", "Work Location"],
}

RESOURCE_DATE_FIELDS = {"joiningDate", "allocationStartDate", "allocationEndDate", "relievingDate", "resignedOn"}
NUMERIC_FIELDS = {"totalExp", "vamExp", "experienceRequired"}


@dataclass
class MappingReport:
    kind: str
    records: List[Dict[str, Any]] = field(default_factory=list)
    skipped: int = 0

    @property
    def received(self) -> int:
        return len(self.records) + self.skipped


def resolve(row: Mapping[str, Any], aliases: Iterable[str]) -> Any:
    """Value under the first alias that holds something, else None."""
    for header in aliases:
        value = row.get(header)
        if not is_blank(value):
            return value
    return None


def _convert(field_name: str, value: Any) -> Any:
    if value is None:
        return None
    if field_name in RESOURCE_DATE_FIELDS:
        return iso_date(value)
    if field_name in NUMERIC_FIELDS:
        return to_int(value)
    return to_text(value)


def map_resource_row(row: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    """None when vamid, name or a parseable joining date is missing."""
    record = {f: _convert(f, resolve(row, headers)) for f, headers in RESOURCE_ALIASES.items()}
    if not record["vamid"] or not record["name"]:
        return None
    if not record["joiningDate"]:
        return None
    return record


def map_rrf_row(row: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    record = {f: _convert(f, resolve(row, headers)) for f, headers in RRF_ALIASES.items()}
    if not record["rrfId"]:
        return None
    record["status"] = "open"
    return record


def map_row(row: Mapping[str, Any], kind: RecordKind) -> Optional[Dict[str, Any]]:
    if kind == "resource":
        return map_resource_row(row)
    if kind == "rrf":
        return map_rrf_row(row)
    raise ValueError(f"unknown record kind {kind!r}; expected one of {RECORD_KINDS}")


def map_rows(rows: Iterable[Mapping[str, Any]], kind: RecordKind) -> MappingReport:
    report = MappingReport(kind=kind)
    for i, row in enumerate(rows):
        record = map_row(row, kind)
        if record is None:
            report.skipped += 1
            logger.debug("Skipping %s row %d: required field missing", kind, i)
            continue
        report.records.append(record)
    logger.info("Mapped %d %s row(s), skipped %d", len(report.records), kind, report.skipped)
    return report


__all__ = [
    "RESOURCE_ALIASES", "RRF_ALIASES", "RECORD_KINDS", "RecordKind", "MappingReport",
    "resolve", "map_resource_row", "map_rrf_row", "map_row", "map_rows",
]
