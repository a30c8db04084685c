"""Tests for services/transcripts.py — transcript normalization and keyword analysis."""

import json

import pytest
from unittest.mock import AsyncMock, patch

from services.transcripts import (
    analyze_emotional_content,
    extract_key_topics,
    extract_memory_references,
    format_timestamp,
    process_transcript_data,
)

RAW = {
    "segments": [
        {"start": 0, "end": 4.2, "speaker": "replica", "text": "Do you remember when you went to the garden?"},
        {"start": 5, "end": 83.4, "speaker": "user", "text": "Back in 1965 I was so happy there with my family"},
    ]
}


class TestHelpers:
    def test_format_timestamp(self):
        assert format_timestamp(0) == "00:00"
        assert format_timestamp(83.4) == "01:23"
        assert format_timestamp(600) == "10:00"

    def test_key_topics(self):
        assert extract_key_topics("We talked about the Garden and family recipes") == ["family", "garden", "recipe"]

    def test_memory_references(self):
        refs = extract_memory_references("Remember when we danced? That was years ago.")
        assert refs == ["Remember when", "years ago"]

    def test_emotional_content(self):
        result = analyze_emotional_content("I am happy but a bit lonely and happy again")
        assert result["positive"] == 2
        assert result["negative"] == 1
        assert result["neutral"] == 10 - 3
        assert {"type": "negative", "word": "lonely", "count": 1} in result["indicators"]


class TestProcessTranscript:
    def test_empty_transcript(self):
        for raw in (None, {}, {"segments": []}):
            processed = process_transcript_data(raw)
            assert processed["word_count"] == 0
            assert processed["full_transcript"] == ""

    def test_full_transcript(self):
        processed = process_transcript_data(RAW)
        lines = processed["full_transcript"].split("\n")
        assert lines[0].startswith("[00:00] replica: Do you remember")
        assert lines[1].startswith("[00:05] user: Back in 1965")
        assert processed["word_count"] == 9 + 11
        assert processed["duration_seconds"] == 83
        assert "garden" in processed["key_topics"]
        assert "family" in processed["key_topics"]
        assert "Back in 1965" in processed["memory_references"]
        assert processed["emotional_indicators"]["positive"] == 1
        assert processed["transcript_segments"][0]["confidence"] == 1.0


class TestPersistence:
    @pytest.mark.asyncio
    async def test_save_serializes_json_columns(self):
        from services.transcripts import save

        processed = process_transcript_data(RAW)
        with patch("services.transcripts.query_one", new_callable=AsyncMock, return_value={"id": "t1"}) as q:
            row = await save("p1", "s1", "c1", processed)
        assert row == {"id": "t1"}
        args = q.call_args.args
        assert args[1:4] == ("p1", "s1", "c1")
        assert json.loads(args[5])[1]["speaker"] == "user"
        assert json.loads(args[10])["positive"] == 1

    @pytest.mark.asyncio
    async def test_search_wraps_term(self):
        from services.transcripts import search

        with patch("services.transcripts.query_many", new_callable=AsyncMock, return_value=[]) as q:
            await search("p1", "garden")
        assert "ILIKE" in q.call_args.args[0]
        assert q.call_args.args[2] == "%garden%"
