"""A module for running external command-line tools."""

import subprocess
import tempfile
from typing import NamedTuple

from logzero import logger


class CommandResult(NamedTuple):
    """A class to hold the results of an external command."""

    args: list[str]
    stdout: str
    stderr: str
    returncode: int

    @property
    def output(self) -> str:
        """Return stdout and stderr joined, for diagnostics."""
        return "\n".join(part for part in (self.stdout, self.stderr) if part)


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def _log_result(result: CommandResult) -> None:
    if result.stdout:
        logger.info(result.stdout)
    if result.stderr:
        if result.returncode != 0:
            logger.error(result.stderr)
        else:
            logger.info(result.stderr)


def execute_command(command: list[str]) -> CommandResult:
    """Execute a command and return its stdout, stderr, and return code.

    Non-zero exit codes are reported through ``returncode`` rather than
    raised, so callers can inspect the captured output first.

    Args:
        command: A list of strings representing the command to execute.

    Returns:
        A CommandResult with the decoded output of the process.
    """
    logger.info(f"Running command: {' '.join(command)}")

    process = subprocess.run(command, capture_output=True, check=False)

    result = CommandResult(
        args=command,
        stdout=_decode(process.stdout),
        stderr=_decode(process.stderr),
        returncode=process.returncode,
    )
    _log_result(result)
    return result


def execute_piped_commands(
    producer: list[str], consumer: list[str]
) -> tuple[CommandResult, CommandResult]:
    """Run ``producer | consumer`` without a shell and wait for both.

    The producer's stdout is connected to the consumer's stdin. The
    producer's stderr is spooled to a temporary file so a chatty producer
    can never block on a full pipe.

    Args:
        producer: The command whose stdout feeds the consumer.
        consumer: The command reading from stdin.

    Returns:
        A pair of CommandResult objects, producer first. The producer's
        stdout is always empty since it was consumed by the pipe.
    """
    logger.info(f"Running command: {' '.join(producer)} | {' '.join(consumer)}")

    with tempfile.TemporaryFile() as producer_stderr:
        producer_process = subprocess.Popen(
            producer, stdout=subprocess.PIPE, stderr=producer_stderr
        )
        try:
            consumer_process = subprocess.Popen(
                consumer,
                stdin=producer_process.stdout,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError:
            producer_process.kill()
            producer_process.wait()
            raise
        finally:
            # Only the consumer may hold the read end, so the producer gets
            # SIGPIPE if the consumer exits early.
            if producer_process.stdout is not None:
                producer_process.stdout.close()

        consumer_stdout, consumer_stderr = consumer_process.communicate()
        producer_returncode = producer_process.wait()

        producer_stderr.seek(0)
        producer_result = CommandResult(
            args=producer,
            stdout="",
            stderr=_decode(producer_stderr.read()),
            returncode=producer_returncode,
        )

    consumer_result = CommandResult(
        args=consumer,
        stdout=_decode(consumer_stdout),
        stderr=_decode(consumer_stderr),
        returncode=consumer_process.returncode,
    )
    _log_result(producer_result)
    _log_result(consumer_result)
    return producer_result, consumer_result
