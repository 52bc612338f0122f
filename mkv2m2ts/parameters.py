"""Validation of the paths given on the command line."""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict

from .errors import InvalidInputError, InvalidOutputError, InvalidTempDirError

OUTPUT_EXTENSION = ".m2ts"


class ConversionParameters(BaseModel):
    """The resolved input, output and temporary locations of one run."""

    model_config = ConfigDict(frozen=True)

    input_path: Path
    output_path: Path
    temp_dir: Path


def _resolve_output_path(input_path: Path, output: Optional[Path]) -> Path:
    output_name = input_path.with_suffix(OUTPUT_EXTENSION).name

    if output is None:
        return input_path.parent / output_name

    if output.is_dir():
        return output.resolve() / output_name

    if not output.parent.is_dir():
        raise InvalidOutputError(f'"{output.parent}" is not a valid directory')
    if output.exists():
        raise InvalidOutputError(
            f'cannot write output to "{output}" as that file already exists'
        )
    if output.suffix != OUTPUT_EXTENSION:
        raise InvalidOutputError(
            f"output filename must use the {OUTPUT_EXTENSION} extension"
        )
    return output.resolve()


def resolve_parameters(
    input_path: Path,
    output: Optional[Path] = None,
    temp_dir: Optional[Path] = None,
) -> ConversionParameters:
    """Validate the CLI paths and derive the output file.

    Args:
    ----
        input_path: The MKV file to convert.
        output: An output directory or a full ``.m2ts`` path. Defaults to the
            input's directory.
        temp_dir: Where intermediate streams are written. Defaults to the
            current working directory.

    Returns
    -------
        The resolved ConversionParameters.

    Raises
    ------
        InvalidInputError: If the input file does not exist.
        InvalidOutputError: If the output location is unusable.
        InvalidTempDirError: If the temporary directory does not exist.

    """
    if not input_path.exists():
        raise InvalidInputError(f'invalid input file "{input_path}"')
    resolved_input = input_path.resolve()

    output_path = _resolve_output_path(resolved_input, output)
    if output_path.exists():
        raise InvalidOutputError(
            f'cannot write output to "{output_path}" as that file already exists'
        )

    if temp_dir is None:
        resolved_temp_dir = Path.cwd()
    elif not temp_dir.is_dir():
        raise InvalidTempDirError(f'temp directory "{temp_dir}" is invalid')
    else:
        resolved_temp_dir = temp_dir.resolve()

    return ConversionParameters(
        input_path=resolved_input,
        output_path=output_path,
        temp_dir=resolved_temp_dir,
    )
