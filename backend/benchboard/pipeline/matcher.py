# backend/benchboard/pipeline/matcher.py
"""
AI matching gateway.

`Matcher` is the seam the API depends on; `GeminiMatcher` is the production
implementation. Each operation:
  1) reduces bench / RRF rows to a few fields (name, vamid, skill / rrfId, posTitle, role)
  2) renders a PROMPTS[...] template with the data embedded as JSON
  3) invokes the chat model once (no retry)
  4) extracts JSON from the reply and validates it with pydantic

Anything that is not JSON, or not the declared shape, raises MatcherParseError.
Transport failures raise MatcherError.

Tests inject a fake chat model (or a fake Matcher) returning canned JSON.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Type, TypeVar, runtime_checkable

from langchain_core.language_models import BaseChatModel
from langchain_core.prompts import ChatPromptTemplate
from pydantic import TypeAdapter, ValidationError

from ..core.config import DEFAULT_OPTIONS
from ..core.exceptions import MatcherError, MatcherParseError
from ..core.prompts import PROMPTS
from ..core.utils import json_loose, to_text
from ..schemas import CandidateMatch, DedupResult, MatchSummary, RRFMatch
from .excel_mapper import RESOURCE_ALIASES, RRF_ALIASES, resolve

logger = logging.getLogger(__name__)

T = TypeVar("T")

# reduced field -> keys to look under, stored-record names first, then sheet headers
BENCH_FIELDS: Dict[str, List[str]] = {
    "name": ["name"] + RESOURCE_ALIASES["name"],
    "vamid": ["vamid"] + RESOURCE_ALIASES["vamid"],
    "skill": ["skill", "primarySkill", "currentSkill"]
             + RESOURCE_ALIASES["primarySkill"] + RESOURCE_ALIASES["currentSkill"],
}
RRF_FIELDS: Dict[str, List[str]] = {
    "rrfId": ["rrfId"] + RRF_ALIASES["rrfId"],
    "posTitle": ["posTitle"] + RRF_ALIASES["posTitle"],
    "role": ["role"] + RRF_ALIASES["role"],
}


def _reduce(rows: Sequence[Mapping[str, Any]], fields: Dict[str, List[str]], key: str) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for row in rows:
        item = {f: to_text(resolve(row, headers)) for f, headers in fields.items()}
        if item[key]:
            out.append(item)
    return out


def reduce_bench_rows(rows: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    return _reduce(rows, BENCH_FIELDS, "vamid")


def reduce_rrf_rows(rows: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    return _reduce(rows, RRF_FIELDS, "rrfId")


def _dumps(obj: Any) -> str:
    return json.dumps(obj, ensure_ascii=False, default=str)


def build_prompt(key: str, **variables: Any) -> str:
    """Render a template to plain text (handy for debugging and tests)."""
    return ChatPromptTemplate.from_template(PROMPTS[key]).format(**variables)


@runtime_checkable
class Matcher(Protocol):
    def best_candidate(self, rrf: Mapping[str, Any], bench: Sequence[Mapping[str, Any]]) -> CandidateMatch: ...

    def best_candidates_for_all(
        self, rrfs: Sequence[Mapping[str, Any]], bench: Sequence[Mapping[str, Any]]
    ) -> List[RRFMatch]: ...

    def summarize(self, results: Sequence[Any]) -> MatchSummary: ...

    def suggest_column_mapping(self, columns: Sequence[str], fields: Sequence[str]) -> Dict[str, Optional[str]]: ...

    def deduplicate(self, rows: Sequence[Mapping[str, Any]], previous_ids: Sequence[str]) -> DedupResult: ...


class GeminiMatcher:
    """Matcher backed by a LangChain chat model (ChatGoogleGenerativeAI in production)."""

    def __init__(self, llm: BaseChatModel) -> None:
        self.llm = llm

    # --- plumbing ---------------------------------------------------------------

    def _ask(self, operation: str, prompt_key: str, variables: Dict[str, Any]) -> str:
        chain = ChatPromptTemplate.from_template(PROMPTS[prompt_key]) | self.llm
        try:
            out = chain.invoke(variables)
        except Exception as exc:  # provider SDK errors have no common base
            logger.error("%s: model call failed: %s", operation, exc)
            raise MatcherError(operation, str(exc)) from exc
        content = getattr(out, "content", out)
        if isinstance(content, list):
            content = "".join(p.get("text", "") if isinstance(p, dict) else str(p) for p in content)
        return str(content or "")

    def _parse(self, operation: str, raw: str, shape: Type[T]) -> T:
        try:
            obj = json_loose(raw)
        except ValueError as exc:
            logger.warning("%s: model reply is not JSON", operation)
            raise MatcherParseError(operation, f"response is not valid JSON ({exc})", raw) from exc
        try:
            return TypeAdapter(shape).validate_python(obj)
        except ValidationError as exc:
            logger.warning("%s: model reply does not match schema", operation)
            raise MatcherParseError(operation, f"response does not match schema: {exc}", raw) from exc

    # --- operations ---------------------------------------------------------------

    def best_candidate(self, rrf: Mapping[str, Any], bench: Sequence[Mapping[str, Any]]) -> CandidateMatch:
        rrf_rows = reduce_rrf_rows([rrf]) or [dict(rrf)]
        raw = self._ask("best_candidate", "best_candidate", {
            "rrf_json": _dumps(rrf_rows[0]),
            "bench_json": _dumps(reduce_bench_rows(bench)),
        })
        return self._parse("best_candidate", raw, CandidateMatch)

    def best_candidates_for_all(
        self, rrfs: Sequence[Mapping[str, Any]], bench: Sequence[Mapping[str, Any]]
    ) -> List[RRFMatch]:
        raw = self._ask("best_candidates_for_all", "best_candidates_for_all", {
            "min_candidates": DEFAULT_OPTIONS["min_candidates"],
            "max_candidates": DEFAULT_OPTIONS["max_candidates"],
            "rrfs_json": _dumps(reduce_rrf_rows(rrfs)),
            "bench_json": _dumps(reduce_bench_rows(bench)),
        })
        return self._parse("best_candidates_for_all", raw, List[RRFMatch])

    def summarize(self, results: Sequence[Any]) -> MatchSummary:
        payload = [r.model_dump() if isinstance(r, RRFMatch) else r for r in results]
        raw = self._ask("summarize", "summarize_matches", {"results_json": _dumps(payload)})
        return self._parse("summarize", raw, MatchSummary)

    def suggest_column_mapping(self, columns: Sequence[str], fields: Sequence[str]) -> Dict[str, Optional[str]]:
        raw = self._ask("suggest_column_mapping", "suggest_column_mapping", {
            "columns_json": _dumps(list(columns)),
            "fields_json": _dumps(list(fields)),
        })
        suggested = self._parse("suggest_column_mapping", raw, Dict[str, Optional[str]])
        known = set(columns)
        mapping: Dict[str, Optional[str]] = {}
        for f in fields:
            col = suggested.get(f)
            mapping[f] = col if col in known else None
        return mapping

    def deduplicate(self, rows: Sequence[Mapping[str, Any]], previous_ids: Sequence[str]) -> DedupResult:
        raw = self._ask("deduplicate", "deduplicate_resources", {
            "rows_json": _dumps(reduce_bench_rows(rows)),
            "previous_ids_json": _dumps(list(previous_ids)),
        })
        return self._parse("deduplicate", raw, DedupResult)


__all__ = [
    "Matcher", "GeminiMatcher", "build_prompt",
    "reduce_bench_rows", "reduce_rrf_rows", "BENCH_FIELDS", "RRF_FIELDS",
]
