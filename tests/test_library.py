"""Tests for the script folder."""

import pytest

from lampmatrix.core.errors import ParseError, ScriptNotFound
from lampmatrix.script.library import ScriptLibrary


@pytest.fixture
def library(tmp_path):
    (tmp_path / "wave.txt").write_text("FILL blue\n\nFILL black\n", encoding="utf-8")
    (tmp_path / "alert.txt").write_text("FILL red\n", encoding="utf-8")
    (tmp_path / "broken.txt").write_text("FILL red\nWOBBLE\n", encoding="utf-8")
    (tmp_path / "notes.md").write_text("not a script", encoding="utf-8")
    (tmp_path / "nested.txt").mkdir()
    return ScriptLibrary(tmp_path)


def test_names_sorted_txt_files_only(library):
    assert library.names() == ["alert", "broken", "wave"]


def test_missing_directory(tmp_path):
    with pytest.raises(ScriptNotFound):
        ScriptLibrary(tmp_path / "missing").names()


def test_load_with_or_without_extension(library):
    assert library.load("wave").name == "wave"
    assert len(library.load("wave.txt")) == 2


def test_load_unknown(library):
    with pytest.raises(ScriptNotFound):
        library.load("nothing")


@pytest.mark.parametrize("name", ["", ".txt", "../wave", "sub/wave", "..\\wave", ".hidden"])
def test_rejects_path_like_names(library, name):
    with pytest.raises(ScriptNotFound):
        library.path_for(name)


def test_exists(library):
    assert library.exists("alert")
    assert not library.exists("nested")
    assert not library.exists("../alert")


def test_compile_errors_propagate(library):
    with pytest.raises(ParseError) as exc:
        library.load("broken")
    assert exc.value.line == 2


def test_bundled_scripts_compile():
    from pathlib import Path

    library = ScriptLibrary(Path(__file__).resolve().parents[1] / "scripts")

    names = library.names()
    assert "heart" in names
    for name in names:
        assert len(library.load(name)) >= 1


def test_non_utf8_script_is_a_parse_error(tmp_path):
    (tmp_path / "binary.txt").write_bytes(b"FILL red\n\xff\xfe\x00\n")

    with pytest.raises(ParseError) as exc:
        ScriptLibrary(tmp_path).load("binary")

    assert exc.value.stage == "compile"
    assert "UTF-8" in exc.value.reason
