import datetime
import platform
from pathlib import Path
from typing import Annotated, Optional, Union

import logzero
import typer
from logzero import logger

from mkv2m2ts import _get_mkv2m2ts_version
from mkv2m2ts.errors import Mkv2M2tsError, ToolFailedError
from mkv2m2ts.mkv2m2ts import mkv2m2ts
from mkv2m2ts.parameters import resolve_parameters

app = typer.Typer()


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"mkv2m2ts version: {_get_mkv2m2ts_version()}")
        raise typer.Exit()


def _print_error(error: Mkv2M2tsError) -> None:
    typer.echo(f"ERROR: {error}", err=True)
    if isinstance(error, ToolFailedError) and error.output:
        typer.echo(f"\n{error.output}", err=True)


@app.command()
def main(
    input_path: Annotated[
        Path,
        typer.Option("--input", "-i", help="Path to the MKV file to convert."),
    ],
    output: Annotated[
        Optional[Path],
        typer.Option(
            "--output",
            "-o",
            help="Output directory or .m2ts file. Defaults to the input's directory.",
        ),
    ] = None,
    temp_dir: Annotated[
        Optional[Path],
        typer.Option(
            "--temp-dir",
            "-t",
            envvar="MKV2M2TS_TEMP_DIR",
            help="Directory for intermediate streams. Defaults to the cwd.",
        ),
    ] = None,
    log_file: Annotated[
        Union[Path, None],
        typer.Option(
            help="Path to the log file. Defaults to <input_file>-<timestamp>.log",
            file_okay=True,
            dir_okay=False,
            writable=True,
        ),
    ] = None,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show the version and exit.",
        ),
    ] = False,
) -> None:
    """Convert a Matroska (MKV) file to an M2TS transport stream."""
    try:
        parameters = resolve_parameters(input_path, output, temp_dir)
    except Mkv2M2tsError as e:
        _print_error(e)
        raise typer.Exit(code=1)

    if log_file is None:
        timestamp = datetime.datetime.now().strftime("%Y%m%d%H%M%S")
        source = parameters.input_path
        log_file = source.with_stem(f"{source.stem}-{timestamp}").with_suffix(".log")
    logzero.logfile(str(log_file))

    try:
        start_time = datetime.datetime.now()
        logger.info(f"Conversion Log for {parameters.input_path.name}")
        logger.info(f"Start Time: {start_time}")
        logger.info(f"Input File: {parameters.input_path}")
        logger.info(f"Input File Size: {parameters.input_path.stat().st_size} bytes")
        logger.info(f"Output File: {parameters.output_path}")
        logger.info(f"Temp Directory: {parameters.temp_dir}")

        mkv2m2ts(parameters)

        logger.info("Conversion Status: Success")
        logger.info(
            f"Output File Size: {parameters.output_path.stat().st_size} bytes"
        )

        end_time = datetime.datetime.now()
        logger.info(f"End Time: {end_time}")
        logger.info(f"Duration: {end_time - start_time}")
        logger.info(f"mkv2m2ts Version: {_get_mkv2m2ts_version()}")
        logger.info(f"Python Version: {platform.python_version()}")
        logger.info(f"Platform: {platform.platform()}")
    except Mkv2M2tsError as e:
        logger.error(f"Conversion Status: Failed ({type(e).__name__})")
        _print_error(e)
        raise typer.Exit(code=1)
    except Exception:
        logger.exception("An error occurred during conversion.")
        raise typer.Exit(code=1)
