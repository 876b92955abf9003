import json
import logging
import pytest
import discord

from utils import log_error, parse_henrik_timestamp, safe_embed_field, safe_json_load
from datetime import timezone


def test_parse_henrik_timestamp_iso():
    ts = "2024-01-01T00:00:00Z"
    dt = parse_henrik_timestamp(ts)
    assert dt.year == 2024
    assert dt.tzinfo == timezone.utc


def test_parse_henrik_timestamp_epoch_ms():
    ts_ms = 1609459200000  # 2021-01-01T00:00:00Z
    dt = parse_henrik_timestamp(ts_ms)
    assert dt.year == 2021
    assert dt.tzinfo == timezone.utc


def test_parse_henrik_timestamp_epoch_s_string():
    ts_s = "1609459200"  # 2021-01-01T00:00:00Z
    dt = parse_henrik_timestamp(ts_s)
    assert dt.year == 2021
    assert dt.tzinfo == timezone.utc


@pytest.mark.parametrize("value", [None, "", "not a date"])
def test_parse_henrik_timestamp_invalid(value):
    assert parse_henrik_timestamp(value) is None


def test_safe_json_load(tmp_path):
    path = tmp_path / "roster.json"
    path.write_text(json.dumps([{"name": "Ari", "tag": "NA1"}]))
    assert safe_json_load(str(path)) == [{"name": "Ari", "tag": "NA1"}]


def test_safe_json_load_missing_and_corrupt(tmp_path):
    assert safe_json_load(str(tmp_path / "missing.json"), default=[]) == []

    corrupt = tmp_path / "corrupt.json"
    corrupt.write_text("{not json")
    assert safe_json_load(str(corrupt), default="fallback") == "fallback"


def test_safe_embed_field_coerces_values():
    embed = discord.Embed()
    safe_embed_field(embed, "Kills", 12)

    assert embed.fields[0].name == "Kills"
    assert embed.fields[0].value == "12"
    assert embed.fields[0].inline is True


def test_safe_embed_field_truncates_long_values():
    embed = discord.Embed()
    safe_embed_field(embed, "N" * 300, "V" * 2000, inline=False)

    field = embed.fields[0]
    assert len(field.name) == 256
    assert len(field.value) == 1024
    assert field.value.endswith("...")
    assert field.inline is False


def test_log_error_format(caplog):
    with caplog.at_level(logging.WARNING):
        log_error("getting MMR for Ari#NA1", ValueError("bad elo"), level=logging.WARNING)

    assert "Error getting MMR for Ari#NA1: ValueError: bad elo" in caplog.text
