"""Tests for the Gemini matching gateway against a fake chat model."""

from __future__ import annotations

import json

import pytest
from langchain_core.language_models import FakeListChatModel
from langchain_core.runnables import RunnableLambda

from benchboard.core.exceptions import MatcherError, MatcherParseError
from benchboard.pipeline.matcher import (
    GeminiMatcher,
    Matcher,
    build_prompt,
    reduce_bench_rows,
    reduce_rrf_rows,
)
from fakes import FakeMatcher

BENCH = [
    {"VAMID": "VAM1", "Name": "Asha", "Primary Skill": "Python", "Grade": "B2"},
    {"vamid": "VAM2", "name": "Ravi", "primarySkill": "Java"},
    {"Name": "No id"},
]
RRFS = [
    {"RRF ID": "RRF-1", "POS Title": "Python Developer", "Role": "Backend"},
    {"rrfId": "RRF-2", "posTitle": "Java Developer"},
]

TWO_RRF_RESULT = [
    {
        "rrfId": "RRF-1",
        "candidates": [
            {"candidate": {"name": "Asha", "vamid": "VAM1"}, "suitabilityScore": 95, "justification": "Python"},
            {"candidate": {"name": "Ravi", "vamid": "VAM2"}, "suitabilityScore": 40, "justification": "Java"},
        ],
    },
    {
        "rrfId": "RRF-2",
        "candidates": [
            {"candidate": {"name": "Ravi", "vamid": "VAM2"}, "suitabilityScore": 92, "justification": "Java"},
        ],
    },
]


def _matcher(*responses: str) -> GeminiMatcher:
    return GeminiMatcher(FakeListChatModel(responses=list(responses)))


def test_reduce_rows_accepts_sheet_and_stored_shapes():
    assert reduce_bench_rows(BENCH) == [
        {"name": "Asha", "vamid": "VAM1", "skill": "Python"},
        {"name": "Ravi", "vamid": "VAM2", "skill": "Java"},
    ]
    assert reduce_rrf_rows(RRFS) == [
        {"rrfId": "RRF-1", "posTitle": "Python Developer", "role": "Backend"},
        {"rrfId": "RRF-2", "posTitle": "Java Developer", "role": None},
    ]


def test_prompts_embed_json_and_keep_literal_braces():
    text = build_prompt("summarize_matches", results_json='[{"rrfId": "RRF-1"}]')
    assert '[{"rrfId": "RRF-1"}]' in text
    assert '{"summary": "..."}' in text


def test_best_candidates_for_all_passes_model_result_through():
    reply = "```json\n" + json.dumps(TWO_RRF_RESULT) + "\n```"
    matches = _matcher(reply).best_candidates_for_all(RRFS, BENCH)
    assert [m.model_dump() for m in matches] == TWO_RRF_RESULT


def test_candidates_are_sorted_by_score():
    unsorted = [{"rrfId": "R", "candidates": [
        {"candidate": {"name": "B", "vamid": "2"}, "suitabilityScore": 50, "justification": ""},
        {"candidate": {"name": "A", "vamid": "1"}, "suitabilityScore": 80, "justification": ""},
    ]}]
    matches = _matcher(json.dumps(unsorted)).best_candidates_for_all(RRFS, BENCH)
    assert [c.candidate.vamid for c in matches[0].candidates] == ["1", "2"]


def test_invalid_json_raises_parse_error():
    with pytest.raises(MatcherParseError) as info:
        _matcher("Sorry, I can't rank these.").best_candidates_for_all(RRFS, BENCH)
    assert info.value.raw == "Sorry, I can't rank these."
    assert info.value.operation == "best_candidates_for_all"


def test_wrong_shape_raises_parse_error():
    with pytest.raises(MatcherParseError):
        _matcher('{"candidate": "Asha"}').best_candidate(RRFS[0], BENCH)
    with pytest.raises(MatcherParseError):
        _matcher('{"candidate": {"name": "A", "vamid": "1"}, "suitabilityScore": 140, "justification": ""}') \
            .best_candidate(RRFS[0], BENCH)


def test_best_candidate():
    reply = '{"candidate": {"name": "Asha", "vamid": "VAM1"}, "suitabilityScore": 93, "justification": "Python"}'
    match = _matcher(reply).best_candidate(RRFS[0], BENCH)
    assert match.candidate.vamid == "VAM1"
    assert match.suitabilityScore == 93


def test_summarize():
    summary = _matcher('{"summary": "2 RRFs analyzed, 2 with excellent candidates."}').summarize(TWO_RRF_RESULT)
    assert summary.summary.startswith("2 RRFs")


def test_column_mapping_nulls_and_unknown_columns():
    reply = '{"VAMID": "VAM ID", "Name": "Full Name", "Joining Date": "null", "Grade": "Band", "Extra": "VAM ID"}'
    mapping = _matcher(reply).suggest_column_mapping(
        ["VAM ID", "Full Name", "DOJ"], ["VAMID", "Name", "Joining Date", "Grade", "Skill"],
    )
    assert mapping == {"VAMID": "VAM ID", "Name": "Full Name", "Joining Date": None, "Grade": None, "Skill": None}


def test_deduplicate():
    result = _matcher('{"newResourceIds": ["VAM2"]}').deduplicate(BENCH, ["VAM1"])
    assert result.newResourceIds == ["VAM2"]


def test_transport_failure_raises_matcher_error():
    def _unavailable(_prompt):
        raise ConnectionError("503 Service Unavailable")

    matcher = GeminiMatcher(RunnableLambda(_unavailable))
    with pytest.raises(MatcherError) as info:
        matcher.summarize([])
    assert not isinstance(info.value, MatcherParseError)


def test_implementations_satisfy_protocol():
    assert isinstance(_matcher("{}"), Matcher)
    assert isinstance(FakeMatcher(), Matcher)
