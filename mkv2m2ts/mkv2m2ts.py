"""The main module of the mkv2m2ts package."""

from enum import Enum
from typing import Optional

from logzero import logger

from .audio_transcoder import transcode_dts_to_ac3
from .cleanup import cleanup_temp_files
from .errors import FrameRateUndetectedError, InvalidTransitionError, MuxFailedError
from .extractor import extract_streams
from .inspector import inspect_media
from .meta import write_meta_file
from .muxer import mux_streams
from .parameters import ConversionParameters
from .rebuilder import rebuild_container
from .session import Session
from .toolchain import locate_toolchain


class PipelineState(str, Enum):
    """The stages a conversion moves through."""

    INIT = "init"
    INSPECTED = "inspected"
    EXTRACTED = "extracted"
    AUDIO_READY = "audio_ready"
    MUX_ATTEMPT = "mux_attempt"
    REBUILDING = "rebuilding"
    DONE = "done"
    FAILED = "failed"


TRANSITIONS: dict[PipelineState, frozenset[PipelineState]] = {
    PipelineState.INIT: frozenset({PipelineState.INSPECTED, PipelineState.FAILED}),
    PipelineState.INSPECTED: frozenset(
        {PipelineState.EXTRACTED, PipelineState.FAILED}
    ),
    PipelineState.EXTRACTED: frozenset(
        {PipelineState.AUDIO_READY, PipelineState.FAILED}
    ),
    PipelineState.AUDIO_READY: frozenset(
        {PipelineState.MUX_ATTEMPT, PipelineState.FAILED}
    ),
    PipelineState.MUX_ATTEMPT: frozenset(
        {PipelineState.DONE, PipelineState.REBUILDING, PipelineState.FAILED}
    ),
    PipelineState.REBUILDING: frozenset(
        {PipelineState.EXTRACTED, PipelineState.FAILED}
    ),
    PipelineState.DONE: frozenset(),
    PipelineState.FAILED: frozenset(),
}


class ConversionPipeline:
    """Drives one session from inspection to the finished M2TS file.

    The only loop is MUX_ATTEMPT -> REBUILDING -> EXTRACTED, which the
    transition check allows once per run.
    """

    def __init__(self, session: Session):
        self.session = session
        self.state = PipelineState.INIT
        self.rebuild_attempted = False

    def _transition(self, new_state: PipelineState) -> None:
        if new_state not in TRANSITIONS[self.state]:
            raise InvalidTransitionError(
                f"cannot move from {self.state.value} to {new_state.value}"
            )
        if new_state is PipelineState.REBUILDING:
            if self.rebuild_attempted:
                raise InvalidTransitionError("the container was already rebuilt once")
            self.rebuild_attempted = True
        logger.debug(f"Pipeline state: {self.state.value} -> {new_state.value}")
        self.state = new_state

    def _inspect(self) -> None:
        media = inspect_media(
            self.session.toolchain.mediainfo, self.session.parameters.input_path
        )
        self.session = self.session.model_copy(update={"media": media})
        self._transition(PipelineState.INSPECTED)

    def _extract_and_prepare_audio(self) -> None:
        plan = extract_streams(self.session)
        self._transition(PipelineState.EXTRACTED)

        if plan.needs_transcode:
            toolchain = self.session.toolchain
            work_files = self.session.work_files
            transcode_dts_to_ac3(
                toolchain.dcadec, toolchain.aften, work_files.dts, work_files.ac3
            )
        self._transition(PipelineState.AUDIO_READY)

    def _mux(self) -> Optional[FrameRateUndetectedError]:
        """Write the meta file and run tsMuxeR.

        Returns the frame-rate failure when a rebuild may still fix it.
        """
        write_meta_file(self.session.inspected_media, self.session.work_files)
        self._transition(PipelineState.MUX_ATTEMPT)
        try:
            mux_streams(
                self.session.toolchain.tsmuxer,
                self.session.work_files.meta,
                self.session.parameters.output_path,
            )
        except FrameRateUndetectedError as e:
            if self.rebuild_attempted:
                raise MuxFailedError(
                    "failure while executing tsMuxeR", output=e.output
                ) from e
            return e
        return None

    def _rebuild(self) -> None:
        self._transition(PipelineState.REBUILDING)
        logger.warning("Attempting to repackage the MKV file and try again.")
        rebuilt = rebuild_container(self.session)
        self.session = self.session.model_copy(
            update={"rebuilt_container_path": rebuilt}
        )

    def _cleanup(self) -> None:
        media = self.session.media
        cleanup_temp_files(
            self.session.work_files,
            media.audio.codec if media is not None else None,
            self.session.rebuilt_container_path,
        )

    def run(self) -> Session:
        """Run the conversion, cleaning up temporary files exactly once.

        Returns
        -------
            The final Session.

        Raises
        ------
            Mkv2M2tsError: Any pipeline failure, after cleanup.

        """
        try:
            self._inspect()
            while True:
                self._extract_and_prepare_audio()
                if self._mux() is None:
                    break
                self._rebuild()
            self._transition(PipelineState.DONE)
            return self.session
        except Exception:
            self._transition(PipelineState.FAILED)
            raise
        finally:
            self._cleanup()


def mkv2m2ts(parameters: ConversionParameters) -> Session:
    """Convert an MKV file to M2TS.

    This function locates the external tools and runs the conversion
    pipeline: inspection, stream extraction, DTS to AC3 conversion when
    needed, tsMuxeR packaging, and a single container rebuild if tsMuxeR
    cannot detect the video frame rate.

    Args:
    ----
        parameters: The resolved input, output and temp locations.

    Returns
    -------
        The final Session of the run.

    """
    toolchain = locate_toolchain()
    session = Session(parameters=parameters, toolchain=toolchain)
    return ConversionPipeline(session).run()
