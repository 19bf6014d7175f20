import json
import pytest

from arena.cli import build_parser, run
from arena.core.paths import ASSETS


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))


def cli(*args):
    return run(["--assets", str(ASSETS), *args])


def test_parser_requires_a_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_formats_lists_sections(capsys):
    assert cli("formats") == 0
    out = capsys.readouterr().out
    assert "XY Singles" in out
    assert "Battle Spot Singles" in out


def test_resolve_prints_chain_and_bans(capsys):
    assert cli("resolve", "OU") == 0
    out = capsys.readouterr().out
    assert "Standard" in out
    assert "Soul Dew" in out


def test_resolve_with_mod(capsys):
    assert cli("resolve", "OU", "--mod", "gen5") == 0
    assert "gen5" in capsys.readouterr().out


def test_audit_reports_defects(capsys):
    assert cli("audit") == 1
    assert "banlists" in capsys.readouterr().out


def test_validate_team_file(tmp_path, capsys):
    team = tmp_path / "team.json"
    team.write_text(json.dumps([{"species": "Garchomp", "ability": "Rough Skin", "moves": ["Earthquake"]}]),
                    encoding="utf-8")
    assert cli("validate", "OU", str(team)) == 0
    assert "valid" in capsys.readouterr().out

    team.write_text(json.dumps([{"species": "Mewtwo", "ability": "Pressure", "moves": ["Psychic"]}]),
                    encoding="utf-8")
    assert cli("validate", "OU", str(team)) == 1
    assert "Mewtwo" in capsys.readouterr().out


def test_unknown_format_is_an_error(tmp_path, capsys):
    team = tmp_path / "team.json"
    team.write_text("[]", encoding="utf-8")
    assert cli("validate", "Not A Format", str(team)) == 2
    assert cli("resolve", "Not A Format") == 2


def test_unreadable_team_file_is_an_error(tmp_path, capsys):
    assert cli("validate", "OU", str(tmp_path / "missing.json")) == 2
    assert "Failed to load" in capsys.readouterr().out

    broken = tmp_path / "broken.json"
    broken.write_text("[{not json", encoding="utf-8")
    assert cli("validate", "OU", str(broken)) == 2
    assert "Failed to load" in capsys.readouterr().out
