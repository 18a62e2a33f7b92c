import logging
import sys

import pytest

from datelayout import cli


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    logger = logging.getLogger("datelayout.cli-test")
    monkeypatch.setattr(cli, "configure_logging", lambda verbose=False: logger)
    return logger


def run(monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["datelayout", *argv])
    cli.main()


def test_list_prints_dates(tmp_path, monkeypatch, capsys):
    inp = tmp_path / "in"
    (inp / "2024" / "3").mkdir(parents=True)
    (inp / "2024" / "3" / "15-note.md").write_text("x")

    run(monkeypatch, "list", "-i", str(inp), "--start", "2024-01-01")

    out = capsys.readouterr().out
    assert "15-note.md\t2024-03-15T00:00:00+00:00" in out
    assert "Found 1 file(s)." in out


def test_organize_dry_run_leaves_files_alone(tmp_path, monkeypatch, capsys):
    inp = tmp_path / "in"
    inp.mkdir()
    (inp / "meeting.md").write_text("x")

    run(
        monkeypatch, "organize", "-i", str(inp), "-o", str(tmp_path / "not-yet"),
        "--unstructured", "--dry-run", "--type", "note",
    )

    out = capsys.readouterr().out
    assert "DRY RUN" in out
    assert "Organized 1 files" in out
    assert (inp / "meeting.md").exists()
    assert not (tmp_path / "not-yet").exists()


def test_organize_moves_files(tmp_path, monkeypatch, capsys):
    inp = tmp_path / "in"
    out_dir = tmp_path / "out"
    inp.mkdir()
    out_dir.mkdir()
    (inp / "a.md").write_text("x")

    run(
        monkeypatch, "organize", "-i", str(inp), "-o", str(out_dir),
        "--unstructured", "--output-structure", "none",
    )

    assert "Organized 1 files" in capsys.readouterr().out
    assert not (inp / "a.md").exists()
    moved = list(out_dir.iterdir())
    assert len(moved) == 1
    assert moved[0].name.endswith("-file-a.md")


def test_config_file_is_read(tmp_path, monkeypatch, capsys):
    inp = tmp_path / "in"
    inp.mkdir()
    (inp / "a.txt").write_text("x")
    ini = tmp_path / "datelayout.ini"
    ini.write_text(f"[datelayout]\ninput_directory = {inp}\nextensions = txt\n")

    run(monkeypatch, "list", "--config", str(ini), "--unstructured")

    out = capsys.readouterr().out
    assert "a.txt" in out
    assert "Found 1 file(s)." in out


def test_configuration_errors_exit_with_status_2(tmp_path, monkeypatch, capsys):
    with pytest.raises(SystemExit) as exc:
        run(monkeypatch, "list", "-i", str(tmp_path), "--timezone", "Nowhere/Bogus")
    assert exc.value.code == 2
    err = capsys.readouterr().err
    assert "Configuration error" in err
    assert "--timezone" in err


def test_unstructured_with_range_is_rejected(tmp_path, monkeypatch, capsys):
    with pytest.raises(SystemExit) as exc:
        run(monkeypatch, "list", "-i", str(tmp_path), "--unstructured", "--start", "2024-01-01")
    assert exc.value.code == 2


def test_no_command_prints_help(monkeypatch, capsys):
    run(monkeypatch)
    assert "organize" in capsys.readouterr().out
