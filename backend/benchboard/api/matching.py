# backend/benchboard/api/matching.py
"""
AI matching endpoints. Every call goes through the injected Matcher.

- POST /api/match/best-candidate      one RRF vs the bench
- POST /api/match/rrfs                every RRF vs the bench (+ optional summary)
- POST /api/match/summary             summarize prior match results
- POST /api/column-mapping            suggest Excel column -> field mapping
- POST /api/resources/deduplicate     vamids in an upload not seen before

No placeholder data is ever returned: a failed or unparseable model reply is a 500.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError

from ..core.exceptions import BenchBoardError, MatcherError
from ..db import crud
from ..db.init import SchemaManager
from ..db.models import resource_to_dict
from ..pipeline.matcher import Matcher
from ..schemas import (
    BestCandidateRequest,
    ColumnMappingRequest,
    DeduplicateRequest,
    MatchRRFsRequest,
    SummaryRequest,
)
from .dependencies import get_matcher, get_schema
from .responses import bad_request, server_error

router = APIRouter(prefix="/api", tags=["Matching"])
logger = logging.getLogger(__name__)


def _stored_bench(schema: SchemaManager):
    try:
        schema.ensure_initialized()
        return schema.run(lambda s: [resource_to_dict(r) for r in crud.list_resources(s)])
    except (SQLAlchemyError, BenchBoardError) as e:
        raise server_error("Failed to load bench resources", e)


@router.post("/match/best-candidate")
def best_candidate(body: BestCandidateRequest, matcher: Matcher = Depends(get_matcher)):
    try:
        match = matcher.best_candidate(body.rrf, body.bench)
    except MatcherError as e:
        raise server_error("Failed to analyze candidates", e)
    return match.model_dump()


@router.post("/match/rrfs")
def match_rrfs(
    body: MatchRRFsRequest,
    matcher: Matcher = Depends(get_matcher),
    schema: SchemaManager = Depends(get_schema),
):
    """
    Rank candidates for every RRF in one model call.
    When `bench` is omitted the stored resources are used.
    The summary (if requested) is generated after the matches, from them.
    """
    bench = body.bench if body.bench is not None else _stored_bench(schema)
    if not bench:
        raise bad_request("No bench resources to match against")

    try:
        matches = matcher.best_candidates_for_all(body.rrfs, bench)
    except MatcherError as e:
        raise server_error("Failed to analyze RRFs", e)

    summary = None
    if body.summarize:
        try:
            summary = matcher.summarize(matches).summary
        except MatcherError as e:
            raise server_error("Failed to summarize matches", e)

    logger.info("Matched %d RRF(s) against %d bench resource(s)", len(matches), len(bench))
    return {"matches": [m.model_dump() for m in matches], "summary": summary}


@router.post("/match/summary")
def summarize_matches(body: SummaryRequest, matcher: Matcher = Depends(get_matcher)):
    try:
        summary = matcher.summarize(body.results)
    except MatcherError as e:
        raise server_error("Failed to summarize matches", e)
    return summary.model_dump()


@router.post("/column-mapping")
def column_mapping(body: ColumnMappingRequest, matcher: Matcher = Depends(get_matcher)):
    try:
        mapping = matcher.suggest_column_mapping(body.excelColumns, body.dataFields)
    except MatcherError as e:
        raise server_error("Failed to analyze column mapping", e)
    return {"mapping": mapping}


@router.post("/resources/deduplicate")
def deduplicate_resources(
    body: DeduplicateRequest,
    matcher: Matcher = Depends(get_matcher),
    schema: SchemaManager = Depends(get_schema),
):
    previous = body.previousResourceIds
    if previous is None:
        try:
            schema.ensure_initialized()
            previous = schema.run(crud.list_vamids)
        except (SQLAlchemyError, BenchBoardError) as e:
            raise server_error("Failed to load existing resource ids", e)

    try:
        result = matcher.deduplicate(body.rows, previous)
    except MatcherError as e:
        raise server_error("Failed to analyze duplicates", e)
    return result.model_dump()
