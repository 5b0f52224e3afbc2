import zipfile
from pathlib import Path
from typing import Optional

import pytest

from jobjar.schemas import JobID, ResolutionRequest, SavepointRestoreSettings

PROGRAM_ARGUMENTS = ("--arg", "suffix")

JOB_CLASS = "jobjar_testjob.WordJob"

# The job module imports the library module, so loading the job class also
# checks that library jars are on the classpath
JOB_MODULE_SOURCE = '''
from jobjar.schemas import JobGraph
import jobjar_testlib


class WordJob:
    def __init__(self, args):
        self.args = args

    def build(self, configuration):
        suffix = self.args[self.args.index("--arg") + 1] if "--arg" in self.args else "default"
        cls = type(self)
        return JobGraph(name=f"{cls.__module__}.{cls.__qualname__}-{suffix}")
'''

LIB_MODULE_SOURCE = '''
def tokenize(line):
    return line.split()
'''

# Job module without the library import, for jars resolved on their own
JOB_MODULE_STANDALONE_SOURCE = JOB_MODULE_SOURCE.replace("import jobjar_testlib\n", "")


def make_jar(
    path: Path,
    entry_class: Optional[str] = None,
    modules: Optional[dict[str, str]] = None,
    attribute: str = "Program-Class",
    manifest: bool = True,
) -> Path:
    """Write a jar (zip archive) with an optional manifest and Python modules."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as archive:
        if manifest:
            lines = ["Manifest-Version: 1.0", "Created-By: jobjar tests"]
            if entry_class:
                lines.append(f"{attribute}: {entry_class}")
            archive.writestr("META-INF/MANIFEST.MF", "\r\n".join(lines) + "\r\n\r\n")
        for name, source in (modules or {}).items():
            archive.writestr(name, source)
    return path


@pytest.fixture
def job_jar(tmp_path):
    """A self-contained job jar declaring JOB_CLASS."""
    return make_jar(
        tmp_path / "jars" / "testjob.jar",
        entry_class=JOB_CLASS,
        modules={"jobjar_testjob.py": JOB_MODULE_STANDALONE_SOURCE},
    )


@pytest.fixture
def user_dir_has_entry_class(tmp_path):
    """
    _test_user_dir_has_entry_class/
        testjob-lib.jar   (library, no entry class)
        testjob.jar       (declares JOB_CLASS)
        test.txt
    """
    user_dir = tmp_path / "_test_user_dir_has_entry_class"
    make_jar(user_dir / "testjob-lib.jar", modules={"jobjar_testlib.py": LIB_MODULE_SOURCE})
    make_jar(
        user_dir / "testjob.jar",
        entry_class=JOB_CLASS,
        modules={"jobjar_testjob.py": JOB_MODULE_SOURCE},
    )
    (user_dir / "test.txt").touch()
    return user_dir


@pytest.fixture
def user_dir_has_not_entry_class(tmp_path):
    """
    _test_user_dir_has_not_entry_class/
        testjob-lib.jar
        test.txt
    """
    user_dir = tmp_path / "_test_user_dir_has_not_entry_class"
    make_jar(user_dir / "testjob-lib.jar", modules={"jobjar_testlib.py": LIB_MODULE_SOURCE})
    (user_dir / "test.txt").touch()
    return user_dir


@pytest.fixture
def make_request():
    """Build a ResolutionRequest with test defaults; keyword arguments override."""
    def _make(**overrides) -> ResolutionRequest:
        options = {
            "job_id": JobID.generate(),
            "savepoint_restore_settings": SavepointRestoreSettings.none(),
            "program_arguments": PROGRAM_ARGUMENTS,
            "library_directory": None,
        }
        options.update(overrides)
        return ResolutionRequest(**options)
    return _make
