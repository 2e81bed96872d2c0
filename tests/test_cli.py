"""Tests for the command line interface."""

import json

import pytest

from training_load import cli


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    """Leave the root logger alone while testing commands."""
    monkeypatch.setattr(cli, "setup_logging", lambda verbose=False: None)


@pytest.fixture
def write_json(tmp_path):
    def _write(name, data):
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return str(path)

    return _write


class TestScoreCommand:
    """Tests for `training-load score`."""

    def test_scores_activity(self, write_json, capsys):
        activity = write_json(
            "ride.json",
            {"name": "Tempo", "durationSeconds": 3600, "modality": "bike", "weightedAveragePower": 220},
        )
        thresholds = write_json("athlete.json", {"ftp": 250})

        cli.main(["score", activity, "--thresholds", thresholds])

        out = capsys.readouterr().out
        assert "Tempo" in out
        assert "power" in out
        assert "77" in out

    def test_missing_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["score", str(tmp_path / "missing.json")])

        assert exc_info.value.code == 1
        assert "Cannot read" in capsys.readouterr().err

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(SystemExit) as exc_info:
            cli.main(["score", str(path)])

        assert exc_info.value.code == 1

    def test_invalid_activity(self, write_json):
        path = write_json("bad.json", {"durationSeconds": -5, "modality": "run"})

        with pytest.raises(SystemExit) as exc_info:
            cli.main(["score", path])

        assert exc_info.value.code == 1


class TestTimelineCommand:
    """Tests for `training-load timeline`."""

    def test_timeline(self, write_json, capsys):
        path = write_json(
            "history.json",
            [
                {"durationSeconds": 3600, "modality": "run", "tss": 100, "activityDate": "2024-01-01"},
                {"durationSeconds": 1800, "modality": "run", "tss": 50, "activityDate": "2024-01-03"},
            ],
        )

        cli.main(["timeline", path, "--end", "2024-01-03", "--days", "7"])

        out = capsys.readouterr().out
        assert "2024-01-01" in out
        assert "2024-01-03" in out
        assert "CTL" in out

    def test_empty_history(self, write_json, capsys):
        path = write_json("history.json", [])

        cli.main(["timeline", path, "--end", "2024-01-03"])

        assert "No completed" in capsys.readouterr().out


class TestReadinessCommand:
    """Tests for `training-load readiness`."""

    def test_exhausted_with_alert(self, capsys):
        cli.main(["readiness", "--tsb", "-32", "--recovery", "80"])

        out = capsys.readouterr().out
        assert "Exhausted" in out
        assert "Fatigue alert" in out
        assert "Optimal" in out

    def test_requires_a_value(self):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["readiness"])

        assert exc_info.value.code == 1


class TestParser:
    """Tests for argument parsing."""

    def test_no_command_prints_help(self, capsys):
        cli.main([])
        assert "usage" in capsys.readouterr().out.lower()

    def test_bad_date(self, write_json):
        path = write_json("history.json", [])

        with pytest.raises(SystemExit) as exc_info:
            cli.main(["timeline", path, "--end", "03/01/2024"])

        assert exc_info.value.code == 2
