"""Tests for JarSource implementations."""

import os
from pathlib import Path

from jobjar.classpath import ClassPathJarSource, StaticJarSource
from jobjar.classpath.jar_source import parse_class_path


def _class_path(*entries: str) -> str:
    return os.pathsep.join(entries)


def test_jar_from_class_path_supplier(tmp_path):
    """Empty segments and directories are dropped, order is kept."""
    file1 = tmp_path / "a.jar"
    file2 = tmp_path / "b.jar"
    directory = tmp_path / "classes"
    file1.touch()
    file2.touch()
    directory.mkdir()

    # The empty strings are important as the shell scripts that prepare
    # a class path often have such entries.
    class_path = _class_path(
        "", "", "", str(file1), "", str(directory), "", str(file2), "", ""
    )

    source = ClassPathJarSource(environ={"CLASSPATH": class_path})

    assert source.get() == [file1, file2]


def test_jar_from_class_path_supplier_sanity_check(tmp_path, monkeypatch):
    """The default source reads CLASSPATH from the process environment."""
    jar = tmp_path / "junit.jar"
    jar.touch()
    monkeypatch.setenv("CLASSPATH", str(jar))

    jar_files = ClassPathJarSource().get()

    assert any("junit" in p.name for p in jar_files)


def test_variable_is_read_on_every_call(tmp_path, monkeypatch):
    jar = tmp_path / "late.jar"
    jar.touch()
    source = ClassPathJarSource()

    monkeypatch.delenv("CLASSPATH", raising=False)
    assert source.get() == []

    monkeypatch.setenv("CLASSPATH", str(jar))
    assert source.get() == [jar]


def test_custom_variable_name(tmp_path):
    jar = tmp_path / "app.jar"
    jar.touch()

    source = ClassPathJarSource(variable="APP_JARS", environ={"APP_JARS": str(jar)})

    assert source.get() == [jar]


def test_duplicates_are_kept(tmp_path):
    jar = tmp_path / "dup.jar"
    jar.touch()

    assert parse_class_path(_class_path(str(jar), str(jar))) == [jar, jar]


def test_missing_files_are_dropped(tmp_path):
    assert parse_class_path(_class_path(str(tmp_path / "missing.jar"))) == []


def test_malformed_input_yields_empty_list():
    assert parse_class_path("") == []
    assert parse_class_path(os.pathsep * 5) == []
    assert parse_class_path("\0not-a-path") == []


def test_static_jar_source_is_unfiltered():
    source = StaticJarSource(["non-existing", Path("other.jar")])

    assert source.get() == [Path("non-existing"), Path("other.jar")]
