"""Tests for the high-score stores."""

import json

import pytest

from gatherer.persistence import InMemoryHighScores, JsonHighScores


@pytest.mark.asyncio
async def test_in_memory_store_keeps_best_per_budget():
    store = InMemoryHighScores()
    await store.initialize()

    assert await store.get_high_score(200) == 0
    assert await store.record_score(200, 40) is True
    assert await store.record_score(200, 30) is False
    assert await store.record_score(200, 40) is False
    assert await store.record_score(100, 10) is True

    assert await store.get_high_score(200) == 40
    assert await store.get_high_score(100) == 10
    await store.close()


@pytest.mark.asyncio
async def test_zero_score_is_never_a_new_best():
    store = InMemoryHighScores()

    assert await store.record_score(50, 0) is False


@pytest.mark.asyncio
async def test_json_store_persists_across_instances(tmp_path):
    path = tmp_path / "scores" / "high_scores.json"

    first = JsonHighScores(path)
    await first.initialize()
    assert await first.record_score(200, 70) is True
    await first.close()

    assert json.loads(path.read_text()) == {"200": 70}

    second = JsonHighScores(path)
    await second.initialize()
    assert await second.get_high_score(200) == 70
    assert await second.record_score(200, 60) is False


@pytest.mark.asyncio
async def test_json_store_starts_empty_when_file_missing(tmp_path):
    store = JsonHighScores(tmp_path / "missing.json")
    await store.initialize()

    assert await store.get_high_score(200) == 0
    assert not (tmp_path / "missing.json").exists()


@pytest.mark.asyncio
async def test_json_store_ignores_unreadable_file(tmp_path, capsys):
    path = tmp_path / "high_scores.json"
    path.write_text("{not json")

    store = JsonHighScores(path)
    await store.initialize()

    assert await store.get_high_score(200) == 0
    assert "unreadable" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_json_store_skips_malformed_entries(tmp_path):
    path = tmp_path / "high_scores.json"
    path.write_text(json.dumps({"200": 15, "abc": 3, "100": "lots"}))

    store = JsonHighScores(path)
    await store.initialize()

    assert await store.get_high_score(200) == 15
    assert await store.get_high_score(100) == 0
