"""
Pipeline engine for the video annotator.

The engine owns the frame loop. Each iteration runs strictly in order:
read -> preprocess -> infer -> map -> report -> draw -> write. Resources
(model context, frame source, video sink) are acquired in Initializing and
released exactly once, in reverse order, in Draining, whatever ended the run.
"""

from __future__ import annotations

import logging
import time
from contextlib import ExitStack
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from typing import Callable, Dict, List, Optional, Tuple

from video_annotator.annotate.overlay import OverlayRenderer, instantaneous_fps
from video_annotator.errors import AnnotatorError, InferenceError, InitError, SourceOpenError
from video_annotator.geometry.mapping import map_detections
from video_annotator.inference.backend import ModelContext
from video_annotator.inference.factory import create_model_context
from video_annotator.inference.labels import LabelTable, load_label_table
from video_annotator.models.config import Config, DEFAULT_FOURCC, DEFAULT_OUTPUT_PATH
from video_annotator.models.detection import AnnotatedDetection
from video_annotator.models.frame import FrameData
from video_annotator.observation import ObservationSource, OpenCVSource, OpenCVSourceConfig
from video_annotator.output.video_sink import VideoSink
from video_annotator.preprocess.resize import Preprocessor
from video_annotator.reporting.console import ConsoleReporter
from video_annotator.runtime.context import PipelineContext

EXIT_SUCCESS = 0
EXIT_FAILURE = 1

ModelLoader = Callable[[], ModelContext]
SinkOpener = Callable[[str, str, float, Tuple[int, int]], Optional[VideoSink]]
FrameCallback = Callable[[FrameData, List[AnnotatedDetection]], None]


class PipelineState(str, Enum):
    INITIALIZING = "initializing"
    STREAMING = "streaming"
    DRAINING = "draining"
    TERMINATED = "terminated"


@dataclass
class PipelineConfig:
    """
    Configuration for the pipeline engine.

    Attributes:
        output_enabled: Try to save the annotated video.
        output_path: Output video path (overwritten if present).
        fourcc: Output codec tag.
        stats_log_interval: Seconds between throughput log messages (0 disables).
    """
    output_enabled: bool = True
    output_path: str = DEFAULT_OUTPUT_PATH
    fourcc: str = DEFAULT_FOURCC
    stats_log_interval: float = 60.0

    @classmethod
    def from_config(cls, config: Config) -> "PipelineConfig":
        return cls(
            output_enabled=config.output.enabled,
            output_path=config.output.path,
            fourcc=config.output.fourcc,
            stats_log_interval=config.pipeline.stats_log_interval,
        )


@dataclass
class PipelineResult:
    """Outcome of one run."""
    exit_code: int
    frame_count: int
    state: PipelineState
    error: Optional[AnnotatorError] = None
    output_path: Optional[str] = None
    states: List[PipelineState] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.exit_code == EXIT_SUCCESS


class PipelineEngine:
    """
    Frame-synchronous annotation pipeline.

    Without an explicit label table, labels come from the loaded model's class
    names (COCO names if it has none), with `label_overrides` applied.

    Example:
        engine = PipelineEngine(loader, source, LabelTable.coco(), PipelineConfig())
        result = engine.run()
        sys.exit(result.exit_code)
    """

    def __init__(
        self,
        model_loader: ModelLoader,
        source: ObservationSource,
        labels: Optional[LabelTable] = None,
        config: Optional[PipelineConfig] = None,
        reporter: Optional[ConsoleReporter] = None,
        renderer: Optional[OverlayRenderer] = None,
        sink_opener: SinkOpener = VideoSink.open,
        label_overrides: Optional[Dict[int, str]] = None,
    ):
        self._model_loader = model_loader
        self.source = source
        self._configured_labels = labels
        self._label_overrides = dict(label_overrides or {})
        self.labels = labels
        self.config = config or PipelineConfig()
        self.reporter = reporter or ConsoleReporter()
        self.renderer = renderer or OverlayRenderer()
        self._sink_opener = sink_opener
        self._callbacks: List[FrameCallback] = []
        self._model: Optional[ModelContext] = None
        self._preprocessor: Optional[Preprocessor] = None
        self.ctx: Optional[PipelineContext] = None
        self.state = PipelineState.INITIALIZING
        self._states: List[PipelineState] = []
        self._size_warned = False
        self._start_time = 0.0
        self._last_stats_log_time = 0.0

    def add_callback(self, callback: FrameCallback) -> None:
        """
        Add a callback to be called after each frame is processed.

        Args:
            callback: Function taking (frame_data, annotated_detections).
        """
        self._callbacks.append(callback)

    def _set_state(self, state: PipelineState) -> None:
        self.state = state
        self._states.append(state)
        logging.debug(f"Pipeline state: {state.value}")

    def run(self) -> PipelineResult:
        """
        Run one complete pass over the source.

        Returns a PipelineResult; exit_code is 0 only when the source was
        read to its end.
        """
        self._states = []
        self.ctx = None
        self._set_state(PipelineState.INITIALIZING)

        stack = ExitStack()
        try:
            ctx = self._initialize(stack)
        except InitError as e:
            logging.error(f"Initialization failed: {e}")
            stack.close()
            return self._terminate(e)
        except BaseException:
            stack.close()
            self._set_state(PipelineState.TERMINATED)
            raise

        try:
            self._set_state(PipelineState.STREAMING)
            error = self._stream(ctx)
        except BaseException:
            self._drain(stack)
            self._set_state(PipelineState.TERMINATED)
            raise

        self._drain(stack)
        return self._terminate(error)

    def _initialize(self, stack: ExitStack) -> PipelineContext:
        """Acquire model, source and (best effort) sink, registering their release."""
        model = self._model_loader()
        stack.callback(self._release, "model context", model.release)
        logging.info(f"Model context ready: input {model.model_width}x{model.model_height}")
        if self._configured_labels is None:
            self.labels = load_label_table(
                overrides=self._label_overrides,
                model_names=getattr(model, "class_names", None),
            )

        self.source.open()
        stack.callback(self._release, "frame source", self.source.close)

        info = self.source.info
        if info.width <= 0 or info.height <= 0:
            raise SourceOpenError(
                f"Video source {self.source.source_id} reported an invalid frame size "
                f"{info.width}x{info.height}"
            )

        ctx = PipelineContext(
            model_width=model.model_width,
            model_height=model.model_height,
            frame_width=info.width,
            frame_height=info.height,
            input_fps=info.fps,
        )

        if self.config.output_enabled:
            sink = self._sink_opener(
                self.config.output_path, self.config.fourcc, ctx.input_fps, ctx.frame_size
            )
            if sink is None:
                logging.warning("VideoWriter failed to open, will not save video.")
            else:
                stack.callback(self._release, "video sink", sink.close)
            ctx.sink = sink

        self._model = model
        self._preprocessor = Preprocessor(
            model.model_width, model.model_height, output_format=model.input_format
        )
        self.ctx = ctx
        return ctx

    def _stream(self, ctx: PipelineContext) -> Optional[InferenceError]:
        """Process frames until end of stream or an inference failure."""
        self._start_time = time.time()
        self._last_stats_log_time = self._start_time
        logging.info(f"Pipeline started: source={self.source.source_id}")

        while True:
            frame_data = self.source.read()
            if frame_data is None:
                self.reporter.summary(ctx.frame_count)
                return None

            frame_index = ctx.next_frame()
            try:
                self._process_frame(ctx, frame_data, frame_index)
            except InferenceError as e:
                e.frame_index = frame_index
                logging.error(f"Inference failed on frame {frame_index}: {e}")
                return e

            self._handle_periodic_tasks(ctx)

    def _process_frame(self, ctx: PipelineContext, frame_data: FrameData, frame_index: int) -> None:
        start = time.perf_counter()
        self._check_frame_size(ctx, frame_data)

        display = frame_data.display_copy()
        buffer = self._preprocessor.prepare(frame_data)
        detections = self._model.infer(buffer)

        boxes = map_detections(
            detections, ctx.model_width, ctx.model_height, ctx.frame_width, ctx.frame_height
        )
        annotated = [
            AnnotatedDetection(detection=det, box=box, label=self.labels.label_for(det.class_id))
            for det, box in zip(detections, boxes)
        ]

        self.reporter.report(frame_index, annotated)
        self.renderer.draw_detections(display, annotated)

        # Same-frame measurement: the FPS burned into this frame covers its own work so far.
        ctx.last_fps = instantaneous_fps(time.perf_counter() - start)
        self.renderer.draw_fps(display, ctx.last_fps, frame_index)

        if ctx.sink is not None:
            ctx.sink.write(display)

        for callback in self._callbacks:
            try:
                callback(frame_data, annotated)
            except Exception as e:
                logging.warning(f"Callback error: {e}")

    def _check_frame_size(self, ctx: PipelineContext, frame_data: FrameData) -> None:
        if self._size_warned or frame_data.size == ctx.frame_size:
            return
        self._size_warned = True
        logging.warning(
            f"Frame size {frame_data.width}x{frame_data.height} differs from the size reported "
            f"at open ({ctx.frame_width}x{ctx.frame_height}); boxes are mapped to the reported size"
        )

    def _handle_periodic_tasks(self, ctx: PipelineContext) -> None:
        interval = self.config.stats_log_interval
        if interval <= 0:
            return
        now = time.time()
        if now - self._last_stats_log_time < interval:
            return
        elapsed = max(now - self._start_time, 1e-9)
        logging.info(
            f"Pipeline stats: frames={ctx.frame_count}, "
            f"avg_fps={ctx.frame_count / elapsed:.1f}, last_fps={ctx.last_fps:.1f}"
        )
        self._last_stats_log_time = now

    def _release(self, name: str, release: Callable[[], None]) -> None:
        try:
            release()
        except Exception as e:
            logging.warning(f"Error releasing {name}: {e}")

    def _drain(self, stack: ExitStack) -> None:
        self._set_state(PipelineState.DRAINING)
        stack.close()
        self._model = None
        self._preprocessor = None

    def _terminate(self, error: Optional[AnnotatorError]) -> PipelineResult:
        self._set_state(PipelineState.TERMINATED)
        ctx = self.ctx
        frame_count = ctx.frame_count if ctx is not None else 0
        output_path = ctx.sink.path if ctx is not None and ctx.sink is not None else None
        exit_code = EXIT_SUCCESS if error is None else EXIT_FAILURE
        logging.info(f"Pipeline stopped: frames={frame_count}, exit_code={exit_code}")
        return PipelineResult(
            exit_code=exit_code,
            frame_count=frame_count,
            state=self.state,
            error=error,
            output_path=output_path,
            states=list(self._states),
        )


def create_engine_from_config(
    model_path: str,
    source_text: str,
    config: Config,
    reporter: Optional[ConsoleReporter] = None,
    sink_opener: SinkOpener = VideoSink.open,
) -> PipelineEngine:
    """
    Factory function to create a PipelineEngine from the typed config.

    Nothing is opened here; the model and source are acquired by run().

    Args:
        model_path: Model artifact path handed to the model backend.
        source_text: Video source argument (single digit = device index, else file path).
        config: Full application config.
    """
    source = OpenCVSource(OpenCVSourceConfig.from_source_config(source_text, config.source))
    overrides = config.model.class_name_overrides
    labels = None
    if config.model.labels_path:
        labels = LabelTable.from_file(config.model.labels_path, overrides)
    return PipelineEngine(
        model_loader=partial(create_model_context, model_path, config.model),
        source=source,
        labels=labels,
        config=PipelineConfig.from_config(config),
        reporter=reporter,
        renderer=OverlayRenderer(config.overlay),
        sink_opener=sink_opener,
        label_overrides=overrides,
    )
