"""Tests for EntryPointResolver."""

from pathlib import Path

import pytest

from conftest import JOB_CLASS, make_jar
from jobjar.entry_point import EntryPointResolver
from jobjar.errors import AmbiguousEntryPoint, EntryPointNotFound, EntryPointResolutionError
from jobjar.schemas import ResolvedEntryPoint


@pytest.fixture
def resolver():
    return EntryPointResolver()


def test_explicit_name_wins_without_scanning(resolver, tmp_path):
    """An explicit name never touches the (here missing) library directory."""
    resolved = resolver.resolve("app.Job", tmp_path / "missing", [Path("non-existing")])

    assert resolved == ResolvedEntryPoint(class_name="app.Job", source_jar=None)


def test_discovers_single_entry_class(resolver, user_dir_has_entry_class):
    resolved = resolver.resolve(None, user_dir_has_entry_class, [])

    assert resolved.class_name == JOB_CLASS
    assert resolved.source_jar == user_dir_has_entry_class / "testjob.jar"


def test_no_entry_class_raises(resolver, user_dir_has_not_entry_class):
    with pytest.raises(EntryPointNotFound, match="Failed to find job JAR on class path"):
        resolver.resolve(None, user_dir_has_not_entry_class, [])


def test_active_jars_are_not_candidates(resolver, user_dir_has_entry_class):
    job_jar = user_dir_has_entry_class / "testjob.jar"

    with pytest.raises(EntryPointNotFound):
        resolver.resolve(None, user_dir_has_entry_class, [job_jar])


def test_multiple_entry_classes_raise(resolver, tmp_path):
    lib = tmp_path / "usrlib"
    first = make_jar(lib / "first.jar", entry_class="app.First")
    second = make_jar(lib / "second.jar", entry_class="app.Second", attribute="Main-Class")
    make_jar(lib / "lib.jar")

    with pytest.raises(AmbiguousEntryPoint) as exc_info:
        resolver.resolve(None, lib, [])

    assert exc_info.value.jars == [first, second]
    assert isinstance(exc_info.value, EntryPointResolutionError)
    assert "Please provide the job class name explicitly" in str(exc_info.value)


def test_scans_active_jars_without_library_directory(resolver, job_jar, tmp_path):
    plain = make_jar(tmp_path / "plain.jar")
    not_a_jar = tmp_path / "classes.zip"
    not_a_jar.touch()

    resolved = resolver.resolve(None, None, [plain, not_a_jar, job_jar])

    assert resolved == ResolvedEntryPoint(class_name=JOB_CLASS, source_jar=job_jar)


def test_no_jars_at_all(resolver):
    with pytest.raises(EntryPointNotFound):
        resolver.resolve(None, None, [])
