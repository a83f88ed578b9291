"""Lifecycle controller for the trimming pipeline.

This module wires the handoff channels, starts the transformer and sink
writer threads, runs the source reader on the calling thread, and waits
for the sink's completion signal. It also owns the interrupt path.
"""

from __future__ import annotations

import os
import signal
import sys
import threading
from types import FrameType
from typing import Any, BinaryIO, Callable

from core.config import CutConfig
from core.constants import INTERRUPT_ABORT, SIGNAL_EXIT_CODE_BASE
from core.errors import BytecutConfigError, PipelineInterrupted
from core.logging_config import flush_diagnostics, get_logger
from core.profiling import ProfileCapture
from core.types import LifecycleState, OutputTarget, PipelineReport
from pipeline.channel import HandoffChannel
from pipeline.sink_writer import SinkWriter, open_output_target
from pipeline.source_reader import SourceReader
from pipeline.transformer import Transformer

_LOGGER = get_logger(__name__)

HANDLED_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class PipelineController:
    """Run one pipeline pass from an input stream to an output target.

    Args:
        config: Validated runtime configuration.
        target: Output target, already opened.
        input_stream: Binary input stream read on the calling thread.
        profiler: Optional profile capture started for the run.
        install_signal_handlers: Whether to hook SIGINT/SIGTERM.
        exit_process: Called with an exit code on fast-abort.
    """

    def __init__(
        self,
        config: CutConfig,
        target: OutputTarget,
        input_stream: BinaryIO,
        profiler: ProfileCapture | None = None,
        install_signal_handlers: bool = True,
        exit_process: Callable[[int], Any] = os._exit,
    ) -> None:
        self._config = config
        self._target = target
        self._input_stream = input_stream
        self._profiler = profiler
        self._install_signal_handlers = install_signal_handlers
        self._exit_process = exit_process
        self._state = LifecycleState.IDLE
        self._cancel_event = threading.Event()
        self._interrupt_count = 0
        self._reading = False

    @property
    def state(self) -> LifecycleState:
        """Return the current lifecycle state."""
        return self._state

    def run(self) -> PipelineReport:
        """Run the pipeline until the input is drained.

        Returns:
            Counts and final state of the run.

        Raises:
            BytecutConfigError: If the profile capture cannot start.
            RuntimeError: If the controller already ran.
        """
        if self._state is not LifecycleState.IDLE:
            raise RuntimeError("PipelineController.run() can only be called once")
        self._start_profiling()
        self._state = LifecycleState.RUNNING
        previous_handlers = self._hook_signals()
        try:
            return self._run_stages()
        finally:
            self._restore_signals(previous_handlers)
            if self._profiler is not None:
                self._profiler.stop()
            self._state = LifecycleState.TERMINATED

    def request_interrupt(self, signum: int) -> None:
        """Handle one external termination request.

        Under the ``drain`` policy the first request stops the reader and
        lets in-flight lines drain; a second request, or the ``abort``
        policy, ends the process at once.

        Raises:
            PipelineInterrupted: To break out of a blocked read or send
                when called on the reader thread.
        """
        self._interrupt_count += 1
        if self._config.interrupt_policy == INTERRUPT_ABORT or self._interrupt_count > 1:
            self._fast_abort(signum)
            return
        if self._state is not LifecycleState.RUNNING:
            return
        self._state = LifecycleState.INTERRUPTED
        self._cancel_event.set()
        if self._reading:
            raise PipelineInterrupted(f"Received {_signal_name(signum)}; draining pipeline.")

    def _run_stages(self) -> PipelineReport:
        line_channel: HandoffChannel[bytes] = HandoffChannel("lines")
        trimmed_channel: HandoffChannel[bytes] = HandoffChannel("trimmed")
        completion = threading.Event()
        reader = SourceReader(
            stream=self._input_stream,
            max_line_bytes=self._config.max_line_bytes,
            cancel_event=self._cancel_event,
        )
        transformer = Transformer(self._config)
        sink = SinkWriter(self._target, cancel_event=self._cancel_event)
        _start_stage("bytecut-transformer", transformer.run, line_channel, trimmed_channel)
        _start_stage("bytecut-sink", sink.run, trimmed_channel, completion)
        _LOGGER.info(
            "pipeline_started",
            target=self._target.name,
            leading_bytes=self._config.leading_bytes,
            trailing_bytes=self._config.trailing_bytes,
            overflow_policy=self._config.overflow_policy,
        )
        self._reading = True
        try:
            reader.run(line_channel)
        except PipelineInterrupted:
            _LOGGER.info("source_read_interrupted", lines_read=reader.lines_read)
        finally:
            self._reading = False
            line_channel.close()
        completion.wait()
        interrupted = self._interrupt_count > 0
        if interrupted:
            _LOGGER.warning("pipeline_interrupted", lines_written=sink.lines_written)
        _LOGGER.info(
            "pipeline_completed",
            lines_read=reader.lines_read,
            lines_forwarded=transformer.lines_forwarded,
            lines_skipped=transformer.lines_skipped,
            lines_written=sink.lines_written,
            output_failed=sink.write_failed,
        )
        return PipelineReport(
            lines_read=reader.lines_read,
            lines_forwarded=transformer.lines_forwarded,
            lines_skipped=transformer.lines_skipped,
            lines_written=sink.lines_written,
            state=LifecycleState.TERMINATED,
            interrupted=interrupted,
            output_failed=sink.write_failed,
        )

    def _start_profiling(self) -> None:
        if self._profiler is None:
            return
        try:
            self._profiler.start()
        except BytecutConfigError:
            self._target.close()
            self._state = LifecycleState.TERMINATED
            raise

    def _fast_abort(self, signum: int) -> None:
        self._state = LifecycleState.TERMINATED
        if self._profiler is not None:
            self._profiler.stop()
        _LOGGER.warning("pipeline_fast_abort", signal=_signal_name(signum))
        flush_diagnostics()
        self._exit_process(SIGNAL_EXIT_CODE_BASE + signum)

    def _handle_signal(self, signum: int, frame: FrameType | None) -> None:
        self.request_interrupt(signum)

    def _hook_signals(self) -> dict[int, Any]:
        if not self._install_signal_handlers:
            return {}
        if threading.current_thread() is not threading.main_thread():
            return {}
        previous: dict[int, Any] = {}
        for signum in HANDLED_SIGNALS:
            previous[signum] = signal.signal(signum, self._handle_signal)
        return previous

    def _restore_signals(self, previous_handlers: dict[int, Any]) -> None:
        for signum, handler in previous_handlers.items():
            signal.signal(signum, handler)


def run_pipeline(
    config: CutConfig,
    input_stream: BinaryIO | None = None,
    target: OutputTarget | None = None,
    install_signal_handlers: bool = True,
) -> PipelineReport:
    """Open the output target and run one pipeline pass.

    Args:
        config: Validated runtime configuration.
        input_stream: Binary input, defaults to standard input.
        target: Output target, opened from ``config`` when omitted.
        install_signal_handlers: Whether to hook SIGINT/SIGTERM.

    Returns:
        Counts and final state of the run.

    Raises:
        BytecutConfigError: If the output target or profile cannot be opened.
    """
    output_target = target if target is not None else open_output_target(config)
    profiler = ProfileCapture(config.cpu_profile) if config.cpu_profile else None
    controller = PipelineController(
        config=config,
        target=output_target,
        input_stream=input_stream if input_stream is not None else sys.stdin.buffer,
        profiler=profiler,
        install_signal_handlers=install_signal_handlers,
    )
    return controller.run()


def _start_stage(name: str, target: Callable[..., None], *args: Any) -> threading.Thread:
    thread = threading.Thread(target=target, args=args, name=name, daemon=True)
    thread.start()
    return thread


def _signal_name(signum: int) -> str:
    try:
        return signal.Signals(signum).name
    except ValueError:
        return str(signum)
