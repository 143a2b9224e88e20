import json
import logging
from pathlib import Path

import pytest

from reliasim import cli

SCENARIO = Path(__file__).resolve().parent.parent / "scenarios" / "booster.yaml"


def extract_json_from_stdout(output: str) -> str:
    """Return the first balanced JSON object in ``output``."""
    json_start = output.find("{")
    if json_start == -1:
        return output

    brace_count = 0
    for i in range(json_start, len(output)):
        if output[i] == "{":
            brace_count += 1
        elif output[i] == "}":
            brace_count -= 1
            if brace_count == 0:
                return output[json_start : i + 1]
    return output


def test_run_writes_results_file(tmp_path: Path, capsys) -> None:
    results_path = tmp_path / "out" / "res.json"

    cli.main(["run", str(SCENARIO), "--results", str(results_path)])

    data = json.loads(results_path.read_text())
    assert set(data) == {"ticks", "dt", "seed", "failures", "hosts"}
    assert data["seed"] == 42
    assert "failure(s) in 900 ticks" in capsys.readouterr().out


def test_run_stdout_json(capsys) -> None:
    cli.main(["run", str(SCENARIO), "--stdout", "--seed", "7"])
    payload = json.loads(extract_json_from_stdout(capsys.readouterr().out))
    assert payload["seed"] == 7
    assert payload["hosts"]["Booster-3"]["destroyed"] is True


def test_run_is_deterministic(capsys) -> None:
    cli.main(["run", str(SCENARIO), "--stdout"])
    first = json.loads(extract_json_from_stdout(capsys.readouterr().out))
    cli.main(["run", str(SCENARIO), "--stdout"])
    second = json.loads(extract_json_from_stdout(capsys.readouterr().out))
    assert first == second


def test_run_missing_file_exits(tmp_path: Path, capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main(["run", str(tmp_path / "missing.yaml")])
    assert exc.value.code == 1
    assert "Scenario file not found" in capsys.readouterr().out


def test_run_invalid_scenario_exits(tmp_path: Path, capsys) -> None:
    bad = tmp_path / "bad.yaml"
    bad.write_text("workflow: []\n")
    with pytest.raises(SystemExit) as exc:
        cli.main(["run", str(bad)])
    assert exc.value.code == 1
    assert "Unrecognized top-level key" in capsys.readouterr().out


def test_inspect_prints_tables(capsys) -> None:
    cli.main(["inspect", str(SCENARIO)])
    out = capsys.readouterr().out
    assert "Prototype LV-T30" in out
    assert "upper_stage" in out and "sea_level" in out
    assert "Final MTBF" in out
    assert "Booster-2" in out


def test_inspect_invalid_exits(tmp_path: Path) -> None:
    bad = tmp_path / "bad.yaml"
    bad.write_text("hosts: {}\n")
    with pytest.raises(SystemExit) as exc:
        cli.main(["inspect", str(bad)])
    assert exc.value.code == 1


def test_no_args_prints_help(capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main([])
    assert exc.value.code == 0
    assert "usage: reliasim" in capsys.readouterr().out


def test_verbose_enables_debug(capsys) -> None:
    try:
        cli.main(["--verbose", "inspect", str(SCENARIO)])
        assert logging.getLogger("reliasim").level == logging.DEBUG
    finally:
        cli.main(["inspect", str(SCENARIO)])
    assert logging.getLogger("reliasim").level == logging.INFO


def test_quiet_limits_logging_to_warnings(capsys) -> None:
    try:
        cli.main(["--quiet", "inspect", str(SCENARIO)])
        assert logging.getLogger("reliasim").level == logging.WARNING
        out = capsys.readouterr().out
        assert "Loading scenario from" not in out
        assert "Prototype LV-T30" in out
    finally:
        cli.main(["inspect", str(SCENARIO)])


def test_format_helpers() -> None:
    assert cli._format_duration(0.123) == "123.0 ms"
    assert cli._format_duration(1.234) == "1.23 s"
    assert cli._format_duration(75.2) == "1m 15.2s"
    assert cli._format_table(["a"], []) == ""
    table = cli._format_table(["Name", "Part"], [["Booster-1", "LV-T30"]])
    assert table.splitlines()[0].startswith("   Name")
