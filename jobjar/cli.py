"""
CLI interface for the jobjar container entrypoint.

Provides commands to resolve the job of a container, inspect the jars it
would consider, and initialize the job configuration.

Failures are printed verbatim to stderr and exit with status 1. Operational
tooling greps for phrases such as "Failed to find job JAR on class path".
"""

import json
import logging
from pathlib import Path

import click
import yaml

from jobjar import __version__
from jobjar.errors import JobJarError


logger = logging.getLogger(__name__)


def _parse_job_id(ctx, param, value):
    from jobjar.schemas import JobID

    if value is None:
        return JobID.zero()
    try:
        return JobID.from_hex(value)
    except ValueError as e:
        raise click.BadParameter(str(e))


def _fail(message: str) -> None:
    click.echo(f"✗ {message}", err=True)
    raise SystemExit(1)


@click.group()
@click.version_option(version=__version__, prog_name="jobjar")
@click.option(
    "--log-level",
    default="INFO",
    show_default=True,
    envvar="JOBJAR_LOG_LEVEL",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level",
)
@click.option(
    "--log-format",
    default="pretty",
    show_default=True,
    envvar="JOBJAR_LOG_FORMAT",
    type=click.Choice(["pretty", "structured"]),
    help="Human-readable or JSON log lines",
)
@click.pass_context
def main(ctx, log_level: str, log_format: str):
    """
    jobjar - Container entrypoint job resolution.

    Decides which program a container runs and which jars it needs.
    """
    from jobjar.utils import setup_logging

    ctx.ensure_object(dict)
    setup_logging(log_level=log_level, log_format=log_format)


@main.command(
    "resolve",
    context_settings={"ignore_unknown_options": True},
)
@click.option(
    "--job-classname", "-c",
    envvar="JOBJAR_JOB_CLASSNAME",
    help="Job class to run. Skips scanning jar manifests.",
)
@click.option(
    "--job-id", "-j",
    callback=_parse_job_id,
    envvar="JOBJAR_JOB_ID",
    help="Job id as 32 hex characters (default: all zeros)",
)
@click.option(
    "--from-savepoint", "-s",
    "savepoint_path",
    envvar="JOBJAR_SAVEPOINT_PATH",
    help="Savepoint to restore the job from",
)
@click.option(
    "--allow-non-restored-state", "-n",
    is_flag=True,
    help="Skip savepoint state that cannot be mapped to the new job",
)
@click.option(
    "--usrlib",
    type=click.Path(path_type=Path),
    envvar="JOBJAR_USRLIB",
    help="User lib directory (default: ./usrlib if it exists)",
)
@click.option(
    "--conf-dir",
    type=click.Path(path_type=Path),
    help="Directory holding job-conf.yaml (default: $JOBJAR_CONF_DIR or ./conf)",
)
@click.option(
    "--classpath-var",
    default="CLASSPATH",
    show_default=True,
    help="Environment variable listing the active jars",
)
@click.argument("program_args", nargs=-1, type=click.UNPROCESSED)
def resolve(
    job_classname,
    job_id,
    savepoint_path,
    allow_non_restored_state: bool,
    usrlib,
    conf_dir,
    classpath_var: str,
    program_args,
):
    """
    Resolve the container's job and print its JobGraph as JSON.

    PROGRAM_ARGS are passed verbatim to the job program.

    Examples:

        jobjar resolve --usrlib /opt/job/usrlib -- --input /data

        jobjar resolve -c wordcount.job.WordCount --from-savepoint s3://sp/1
    """
    from jobjar.classpath import ClassPathJarSource
    from jobjar.config import default_library_directory, load_configuration
    from jobjar.retriever import ClassPathJobGraphRetriever
    from jobjar.schemas import SavepointRestoreSettings

    if allow_non_restored_state and not savepoint_path:
        raise click.UsageError("--allow-non-restored-state requires --from-savepoint")

    if savepoint_path:
        savepoint_settings = SavepointRestoreSettings.for_path(
            savepoint_path, allow_non_restored_state
        )
    else:
        savepoint_settings = SavepointRestoreSettings.none()

    try:
        configuration = load_configuration(conf_dir)
        retriever = ClassPathJobGraphRetriever.create(
            job_id,
            savepoint_settings,
            program_arguments=program_args,
            entry_class_name=job_classname,
            jar_source=ClassPathJarSource(variable=classpath_var),
            library_directory=usrlib if usrlib is not None else default_library_directory(),
        )
        job_graph = retriever.retrieve_job_graph(configuration)
    except JobJarError as e:
        logger.error("Job graph resolution failed", exc_info=True)
        _fail(str(e))

    click.echo(json.dumps(job_graph.to_dict(), indent=2))


@main.command("jars")
@click.argument("directory", required=False, type=click.Path(path_type=Path))
@click.option(
    "--classpath-var",
    default="CLASSPATH",
    show_default=True,
    help="Environment variable listing the active jars",
)
def list_jars(directory, classpath_var: str):
    """
    List candidate jars and the entry class each declares.

    Scans DIRECTORY when given, otherwise the active class path.
    """
    from jobjar.classpath import ClassPathJarSource, list_jar_files, read_candidate
    from jobjar.classpath.scanner import is_jar_file

    try:
        if directory is not None:
            jars = list_jar_files(directory)
        else:
            jars = [p for p in ClassPathJarSource(variable=classpath_var).get() if is_jar_file(p)]

        if not jars:
            click.echo("No JAR files found.")
            return

        for jar in jars:
            candidate = read_candidate(jar)
            click.echo(f"{candidate.path}  {candidate.entry_class or '-'}")
    except JobJarError as e:
        _fail(str(e))


@main.command("init")
@click.option(
    "--conf-dir",
    type=click.Path(path_type=Path),
    help="Directory to write job-conf.yaml to (default: $JOBJAR_CONF_DIR or ./conf)",
)
@click.option("--force", is_flag=True, help="Overwrite existing configuration")
def init(conf_dir, force: bool):
    """Initialize the job configuration."""
    from jobjar.config import CONFIG_FILE_NAME, DEFAULT_PARALLELISM, get_conf_dir

    if conf_dir is None:
        conf_dir = get_conf_dir()
    conf_dir.mkdir(parents=True, exist_ok=True)

    cfg_path = conf_dir / CONFIG_FILE_NAME
    if cfg_path.exists() and not force:
        click.echo(f"Config already exists at {cfg_path}. Use --force to overwrite.", err=True)
        raise SystemExit(1)

    default_cfg = {
        DEFAULT_PARALLELISM: 1,
        "env_file": None,
    }
    cfg_path.write_text(yaml.safe_dump(default_cfg, sort_keys=False))

    click.echo(f"Initialized jobjar config at {cfg_path}")


if __name__ == "__main__":
    main()
