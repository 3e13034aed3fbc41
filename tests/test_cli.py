"""Tests for the facemood CLI."""

import json

import pytest
import yaml

from helpers import make_detection

from facemood.cli import build_parser, main
from facemood.config import EngineConfig


def _write_frames(path, frames):
    with open(path, "w") as f:
        for frame in frames:
            f.write((frame if isinstance(frame, str) else json.dumps(frame)) + "\n")


@pytest.fixture
def replay_file(tmp_path):
    happy = make_detection({"happy": 0.9, "neutral": 0.05}).to_dict()
    path = tmp_path / "frames.jsonl"
    _write_frames(path, [
        {"t": 0.0, "detections": [happy]},
        {"t": 1.0, "detections": []},
        "not json",
        {"t": 7.0, "detections": []},
    ])
    return path


class TestParser:
    def test_replay_args(self):
        args = build_parser().parse_args(
            ["replay", "x.jsonl", "--trace", "verbose", "--trace-output", "t.jsonl"]
        )
        assert args.command == "replay"
        assert args.trace == "verbose"
        assert args.trace_output == "t.jsonl"

    def test_no_command_exits(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code == 1


class TestInfo:
    def test_lists_emotions_and_rules(self, capsys):
        main(["info"])
        out = capsys.readouterr().out
        assert "confused" in out
        assert "contempt_anger" in out
        assert "validity window:    5.0s" in out
        assert "modifier range:     [0.5, 2.0]" in out


class TestConfig:
    def test_dumps_defaults(self, capsys):
        main(["config"])
        data = yaml.safe_load(capsys.readouterr().out)
        assert data == EngineConfig().to_dict()

    def test_loads_file(self, tmp_path, capsys):
        path = tmp_path / "engine.yaml"
        path.write_text("scoring:\n  noise_floor: 0.12\n")
        main(["config", "--config", str(path)])
        data = yaml.safe_load(capsys.readouterr().out)
        assert data["scoring"]["noise_floor"] == 0.12

    def test_invalid_file_exits(self, tmp_path, capsys):
        path = tmp_path / "bad.yaml"
        path.write_text("scoring:\n  noise: 0.12\n")
        with pytest.raises(SystemExit) as exc:
            main(["config", "--config", str(path)])
        assert exc.value.code == 1
        assert "invalid config" in capsys.readouterr().err


class TestReplay:
    def test_json_output(self, replay_file, capsys):
        main(["replay", str(replay_file), "--json"])

        rows = [json.loads(line) for line in capsys.readouterr().out.splitlines()]

        assert [r["t"] for r in rows] == [0.0, 1.0, 7.0]
        assert rows[0]["emotion"] == "happy"
        assert rows[1]["emotion"] is None
        assert rows[1]["stable"] == "happy"
        assert rows[2]["stable"] == "neutral"

    def test_text_summary(self, replay_file, capsys):
        main(["replay", str(replay_file)])
        out = capsys.readouterr().out
        assert "Frames: 3  classified: 1  skipped lines: 1" in out

    def test_trace_output(self, replay_file, tmp_path, capsys):
        trace = tmp_path / "trace.jsonl"
        main(["replay", str(replay_file), "--json", "--trace", "minimal",
              "--trace-output", str(trace)])

        types = [json.loads(line)["record_type"] for line in trace.read_text().splitlines()]
        assert types.count("classification") == 3
        assert "stable_emotion" in types

    def test_missing_file(self, tmp_path):
        with pytest.raises(SystemExit) as exc:
            main(["replay", str(tmp_path / "missing.jsonl")])
        assert exc.value.code == 1
