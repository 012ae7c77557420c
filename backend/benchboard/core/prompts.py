# backend/benchboard/core/prompts.py
"""
Prompt templates used by the matching gateway.
- Keys: best_candidate, best_candidates_for_all, summarize_matches,
  suggest_column_mapping, deduplicate_resources
- These are LangChain-friendly templates (use with ChatPromptTemplate.from_template).
  Literal JSON braces are escaped; only the listed variables stay as placeholders.
- Every variable is filled with JSON produced by the caller, embedded verbatim.
"""

from __future__ import annotations

from typing import Dict, List

def _escape_braces_keep_vars(template: str, keep_vars: List[str]) -> str:
    esc = template.replace("{", "{{").replace("}", "}}")
    for v in keep_vars:
        esc = esc.replace("{{" + v + "}}", "{" + v + "}")
    return esc

PROMPTS: Dict[str, str] = {}

# 1) Single best candidate for one RRF
PROMPTS["best_candidate"] = _escape_braces_keep_vars(r"""
You are an expert HR analyst specializing in matching candidates to job requirements.
You are given:
1. An RRF (Resource Request Form) describing the requirements for a role.
2. A bench report listing available employees and their skills.

Identify the single best candidate from the bench report for this RRF.
Use ONLY these keys: from the RRF 'rrfId', 'posTitle', 'role'; from the bench 'name', 'vamid', 'skill'.
Provide a suitability score between 0 and 100 and a brief justification.

RRF:
{rrf_json}

Bench:
{bench_json}

Return STRICT JSON only, no markdown:
{
  "candidate": {"name": "Jane Doe", "vamid": "VAM12345"},
  "suitabilityScore": 95,
  "justification": "Jane's primary skill is React, which is what the role asks for."
}
""", ["rrf_json", "bench_json"])

# 2) Top candidates for every RRF in a batch
PROMPTS["best_candidates_for_all"] = _escape_braces_keep_vars(r"""
You are an expert HR analyst acting as a data processing service.
You are given two JSON arrays: the RRFs and the bench resources.

For EACH RRF, identify the top {min_candidates}-{max_candidates} most suitable candidates from the bench.
Use ONLY these keys: from the RRFs 'rrfId', 'posTitle', 'role'; from the bench 'name', 'vamid', 'skill'.
Match the bench 'skill' against the RRF 'posTitle' and 'role'.

For each candidate provide:
1. name and vamid, copied exactly from the bench data
2. a suitability score from 0 to 100 based on the skill match
3. a brief justification

RRFs:
{rrfs_json}

Bench:
{bench_json}

Return STRICT JSON only: an array with one item per RRF, candidates sorted by
suitabilityScore descending. No explanatory text, no markdown.
[
  {
    "rrfId": "RRF-001",
    "candidates": [
      {"candidate": {"name": "", "vamid": ""}, "suitabilityScore": 0, "justification": ""}
    ]
  }
]
""", ["min_candidates", "max_candidates", "rrfs_json", "bench_json"])

# 3) Narrative summary over match results
PROMPTS["summarize_matches"] = _escape_braces_keep_vars(r"""
You are an expert HR analyst. You have the results of a matching process between
RRFs and available bench resources.

Matching results:
{results_json}

Write a brief, insightful summary that includes:
- the total number of RRFs analyzed
- the number of RRFs with at least one "Excellent" candidate (suitabilityScore > 90)
- any RRFs that have no suitable candidates
- one concluding sentence on the overall state of the bench relative to the open requests

Return STRICT JSON only:
{"summary": "..."}
""", ["results_json"])

# 4) Column mapping for a newly uploaded sheet
PROMPTS["suggest_column_mapping"] = _escape_braces_keep_vars(r"""
You are an expert data analyst specializing in mapping Excel columns to application data fields.
Consider the semantic meaning of both the Excel columns and the data fields.

Excel columns: {columns_json}
Data fields: {fields_json}

Return STRICT JSON only: an object whose keys are the data fields and whose values
are the matching Excel column names. Use null when no column fits.
{
  "VAMID": "VAM ID",
  "Name": "Full Name",
  "Joining Date": null
}
""", ["columns_json", "fields_json"])

# 5) New-vs-known resource deduplication
PROMPTS["deduplicate_resources"] = _escape_braces_keep_vars(r"""
You are an expert in resource management and data analysis. You are given rows from a
newly uploaded bench sheet and the list of VAMIDs already on record.

Identify the resources in the new rows that are NOT already on record. Allow for slight
discrepancies (spacing, casing, prefixes, name variations) and use your judgment to decide
whether a row is truly new or a variation of an existing record.

New rows:
{rows_json}

VAMIDs on record:
{previous_ids_json}

Return STRICT JSON only, using the VAMIDs as written in the new rows:
{"newResourceIds": ["VAM123", "VAM456"]}
""", ["rows_json", "previous_ids_json"])


__all__ = ["PROMPTS"]
