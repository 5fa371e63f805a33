"""
Request lifecycle for an editing session.

A WatermarkSession holds the picture, both parameter sets and the single
observed RequestStatus:

    idle -> pending -> success | failure -> idle
                ^______________________________|  (new submission)

Submissions are fire-and-forget. Each one gets the next sequence number and
a Submission handle; only the most recent, still-active submission may
commit its outcome. Superseded or reset submissions are left to finish on
the transport and their results are discarded.
"""
from __future__ import annotations

import asyncio
import shutil
import tempfile
import uuid
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, Tuple, Union

from watermark_builder.api.client import WatermarkClient
from watermark_builder.api.exceptions import WatermarkClientError
from watermark_builder.api.schemas import (
    CustomWatermarkParams,
    DensityLevel,
    FontDecoration,
    FontWeight,
    ImagePayload,
    TextWatermarkParams,
)
from watermark_builder.infra.logging import LogContext, get_logger, set_submission_id
from watermark_builder.picker import ImageSelection

logger = get_logger(__name__)


# =============================================================================
# Editing defaults
# =============================================================================

SUPPORTED_FONT_FAMILIES: Tuple[str, ...] = ("Roboto", "Times New Roman")

DEFAULT_FONT_SIZE = 12
FONT_SIZES: Tuple[int, ...] = (8, 12, 16, 18, 24, 32, 36, 48, 64, 72)


def default_text_params() -> TextWatermarkParams:
    """Text parameters a new session starts with."""
    return TextWatermarkParams(
        text="",
        font_family=SUPPORTED_FONT_FAMILIES[0],
        font_size=24,
        density_level=DensityLevel.MEDIUM,
        color="000000",
        opacity=1.0,
        rotation_angle=0,
        font_italic=False,
        font_weight=FontWeight.W400,
        shadow_opacity=0.0,
        shadow_blur_radius=0,
        shadow_offset_x=0,
        shadow_offset_y=0,
        shadow_color="000000",
        font_decorations=FontDecoration.NONE,
        stroke_color="000000",
        stroke_opacity=0.0,
    )


def default_custom_params() -> CustomWatermarkParams:
    """Custom parameters a new session starts with; no watermark picked yet."""
    return CustomWatermarkParams(
        watermark=ImagePayload.empty(),
        opacity=1.0,
        rotation_angle=0,
        density_level=DensityLevel.MEDIUM,
    )


# =============================================================================
# Status
# =============================================================================


class ControlsType(str, Enum):
    """Which watermark mode a submission uses."""
    TEXT_WATERMARK = "text"
    CUSTOM_WATERMARK = "custom"


class RequestState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class RequestStatus:
    """Observed outcome of the latest submission."""

    state: RequestState
    data: Optional[bytes] = field(default=None, repr=False)
    message: Optional[str] = None

    @classmethod
    def idle(cls) -> "RequestStatus":
        return cls(RequestState.IDLE)

    @classmethod
    def pending(cls) -> "RequestStatus":
        return cls(RequestState.PENDING)

    @classmethod
    def success(cls, data: bytes) -> "RequestStatus":
        return cls(RequestState.SUCCESS, data=data)

    @classmethod
    def failure(cls, message: str) -> "RequestStatus":
        return cls(RequestState.FAILURE, message=message)


StatusListener = Callable[[RequestStatus], None]


class Submission:
    """
    Handle for one submitted request.

    cancel() makes the eventual completion inert; the HTTP call itself keeps
    running until it finishes.
    """

    def __init__(self, sequence: int, mode: ControlsType):
        self.sequence = sequence
        self.mode = mode
        self._active = True
        self._task: Optional[asyncio.Task] = None

    @property
    def active(self) -> bool:
        return self._active

    @property
    def done(self) -> bool:
        return self._task is not None and self._task.done()

    def cancel(self) -> None:
        self._active = False

    async def wait(self) -> None:
        """Wait until the network call has completed (committed or discarded)."""
        if self._task is not None:
            await self._task

    def __repr__(self) -> str:
        return f"Submission(sequence={self.sequence}, mode={self.mode.value}, active={self._active})"


# =============================================================================
# Session
# =============================================================================


class WatermarkSession:
    """
    Parameters, picture and request status for one editing session.

    Usage:
        session = WatermarkSession(client)
        session.image = picture
        session.text_params.text = "Hello"
        submission = session.submit()
        await submission.wait()
        if session.status.state is RequestState.SUCCESS:
            session.export_result()
    """

    def __init__(
        self,
        client: WatermarkClient,
        text_params: Optional[TextWatermarkParams] = None,
        custom_params: Optional[CustomWatermarkParams] = None,
        export_dir: Optional[Union[str, Path]] = None,
    ):
        """
        Initialize session.

        Args:
            client: Client used for every submission
            text_params: Initial text parameters (default: editing defaults)
            custom_params: Initial custom parameters (default: editing defaults)
            export_dir: Base directory for export_result (default: system temp dir)
        """
        self.client = client
        self.controls_type = ControlsType.TEXT_WATERMARK
        self.text_params = text_params if text_params is not None else default_text_params()
        self.custom_params = custom_params if custom_params is not None else default_custom_params()
        self.image: Optional[ImagePayload] = None
        self.export_dir = Path(export_dir) if export_dir is not None else None

        self._status = RequestStatus.idle()
        self._sequence = 0
        self._current: Optional[Submission] = None
        self._listeners: List[StatusListener] = []

    @property
    def status(self) -> RequestStatus:
        return self._status

    @property
    def sequence(self) -> int:
        """Sequence number of the most recent submission (0 before any)."""
        return self._sequence

    def subscribe(self, listener: StatusListener) -> Callable[[], None]:
        """
        Register a callback for status changes.

        Returns:
            Callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_status(self, status: RequestStatus) -> None:
        self._status = status
        for listener in list(self._listeners):
            listener(status)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def submit(self) -> Optional[Submission]:
        """
        Send the current picture and active parameter set.

        Must be called from a running event loop. Parameters are snapshotted,
        so later edits do not affect this submission.

        Returns:
            Submission handle, or None when no picture is set
        """
        if self.image is None:
            logger.debug("submit_skipped_no_image")
            return None

        loop = asyncio.get_running_loop()
        call = self._prepare_call(self.image)

        self._set_status(RequestStatus.pending())
        self._sequence += 1
        submission = Submission(self._sequence, self.controls_type)

        if self._current is not None:
            self._current.cancel()
        self._current = submission

        submission._task = loop.create_task(self._run(submission, call))
        return submission

    def _prepare_call(self, image: ImagePayload) -> Callable[[], Awaitable[bytes]]:
        if self.controls_type is ControlsType.TEXT_WATERMARK:
            text_params = self.text_params.model_copy()
            return lambda: self.client.process_text(image, text_params)
        custom_params = self.custom_params.model_copy()
        return lambda: self.client.process_custom(image, custom_params)

    async def _run(
        self,
        submission: Submission,
        call: Callable[[], Awaitable[bytes]],
    ) -> None:
        set_submission_id(submission.sequence)
        with LogContext(mode=submission.mode.value):
            try:
                data = await call()
            except WatermarkClientError as e:
                outcome = RequestStatus.failure(e.message)
            else:
                outcome = RequestStatus.success(data)
            self._commit(submission, outcome)

    def _commit(self, submission: Submission, outcome: RequestStatus) -> bool:
        if (
            not submission.active
            or submission.sequence != self._sequence
            or self._status.state is not RequestState.PENDING
        ):
            logger.info(
                "stale_outcome_discarded",
                extra={
                    "sequence": submission.sequence,
                    "latest_sequence": self._sequence,
                    "state": outcome.state.value,
                },
            )
            return False

        logger.info("outcome_committed", extra={"state": outcome.state.value})
        self._set_status(outcome)
        return True

    def reset(self) -> None:
        """Return to idle, e.g. when the result view is dismissed."""
        if self._current is not None:
            self._current.cancel()
            self._current = None
        self._set_status(RequestStatus.idle())

    # -------------------------------------------------------------------------
    # Pictures and results
    # -------------------------------------------------------------------------

    async def apply_selection(self, selection: ImageSelection, watermark: bool = False) -> bool:
        """
        Wait for a picked image and store it.

        Args:
            selection: Pending image selection
            watermark: Store as the custom watermark instead of the picture

        Returns:
            True if an image was picked and stored
        """
        payload = await selection.wait()
        if payload is None:
            return False
        if watermark:
            self.custom_params.watermark = payload
        else:
            self.image = payload
        return True

    def export_result(self, directory: Optional[Union[str, Path]] = None) -> Optional[Path]:
        """
        Write the successful result to a fresh directory.

        The file is named after the submitted picture, or gets a generated
        PNG name when the picture has none. Failures are logged, remove the
        partially created directory and leave the session untouched.

        Returns:
            Path of the written file, or None
        """
        if self._status.state is not RequestState.SUCCESS or self.image is None:
            return None

        base_dir = Path(directory or self.export_dir or tempfile.gettempdir())
        target_dir = base_dir / str(uuid.uuid4()).upper()
        file_name = Path(self.image.name).name
        if file_name in ("", ".."):
            file_name = f"{str(uuid.uuid4()).upper()}.png"
        target = target_dir / file_name

        try:
            target_dir.mkdir(parents=True)
            try:
                target.write_bytes(self._status.data or b"")
            except OSError:
                shutil.rmtree(target_dir, ignore_errors=True)
                raise
        except OSError as e:
            logger.warning(
                "result_export_failed",
                extra={"path": str(target), "error": str(e)},
            )
            return None

        logger.info("result_exported", extra={"path": str(target)})
        return target
