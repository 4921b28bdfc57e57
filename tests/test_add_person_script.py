from __future__ import annotations

import importlib.util
from pathlib import Path

import pytest

SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "add_person.py"


@pytest.fixture()
def add_person():
    spec = importlib.util.spec_from_file_location("add_person", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_creates_person_for_user_id(add_person, temp_db, environment, user_id_class, capsys):
    add_person.main(["--env", environment.id, "--user-id", "abc"])
    out = capsys.readouterr().out
    assert "OK: person ready" in out
    assert "userId: abc" in out


def test_creates_bare_person(add_person, temp_db, environment, capsys):
    add_person.main(["--env", environment.id])
    assert "ID: " in capsys.readouterr().out


def test_rejects_unknown_environment(add_person, temp_db):
    with pytest.raises(SystemExit, match="does not exist"):
        add_person.main(["--env", "zunknownenv000000000000000"])


def test_reports_configuration_failure(add_person, temp_db, environment):
    with pytest.raises(SystemExit, match="configuration"):
        add_person.main(["--env", environment.id, "--user-id", "abc"])
