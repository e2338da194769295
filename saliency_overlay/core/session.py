"""Overlay session: holds the current state and runs analyses off-thread."""

from __future__ import annotations

import concurrent.futures
import threading
from typing import Callable, List, Optional

from ..vision.debug import save_debug_overlay
from ..vision.errors import SaliencyError
from ..vision.models import Rect, SaliencyMode, SourceImage
from ..vision.orchestrator import SaliencyOrchestrator
from ..utils.validation import validate_display_rect
from . import state as transitions
from .config import config
from .logger import log
from .state import OverlayState, RequestToken

Subscriber = Callable[[OverlayState], None]


class OverlaySession:
    """Single-writer owner of :class:`OverlayState`.

    User actions (image selection, mode changes, layout updates) are applied
    synchronously. Analyses run on a worker pool; their results are applied
    only if they still match the pending request.
    """

    def __init__(
        self,
        orchestrator: Optional[SaliencyOrchestrator] = None,
        max_workers: Optional[int] = None,
    ) -> None:
        self.orchestrator = orchestrator or SaliencyOrchestrator()
        self._state = OverlayState()
        self._lock = threading.Lock()
        # Serialises delivery; reentrant so subscribers may act on the session
        self._publish_lock = threading.RLock()
        self._version = 0
        self._delivered_version = 0
        self._subscribers: List[Subscriber] = []
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=max_workers or config.analysis_workers,
            thread_name_prefix="saliency",
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    @property
    def state(self) -> OverlayState:
        with self._lock:
            return self._state

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback`` for every new state; returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def select_image(self, image: Optional[SourceImage]) -> None:
        """Make ``image`` current. Empty selections are ignored."""
        if image is None:
            log.debug("Image selection was empty; keeping current state")
            return
        self._update(lambda current: transitions.select_image(current, image))
        log.info(f"Selected image {image.image_id} ({image.size.width}x{image.size.height})")

    def select_mode(
        self,
        mode: Optional[SaliencyMode],
    ) -> Optional[concurrent.futures.Future]:
        """Switch overlay mode; ``None`` resets to no overlay.

        Returns a future resolving to the state after the analysis was applied,
        or ``None`` when nothing was started.
        """
        if mode is None:
            self.reset()
            return None

        with self._lock:
            new_state, token = transitions.request_analysis(self._state, mode)
            if token is not None:
                self._state = new_state
                self._version += 1
                version = self._version

        if token is None:
            log.warning(f"No image selected; ignoring {mode.value} request")
            return None

        self._publish(new_state, version)
        image = new_state.image
        return self._executor.submit(self._run_analysis, token, image, mode)

    def reset(self) -> None:
        self._update(transitions.reset)

    def update_layout(self, display_rect: Rect) -> None:
        """Recompute geometry for a new display rect (resize, rotation)."""
        if not validate_display_rect(display_rect):
            return
        self._update(lambda current: transitions.relayout(current, display_rect))

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    def __enter__(self) -> OverlaySession:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _run_analysis(self, token: RequestToken, image: SourceImage, mode: SaliencyMode) -> OverlayState:
        try:
            observation = self.orchestrator.analyze(image, mode)
        except SaliencyError as exc:
            log.warning(f"Request {token.sequence} aborted: {exc}")
            return self._update(lambda current: transitions.apply_failure(current, token))

        def apply(current: OverlayState) -> OverlayState:
            if token != current.pending:
                log.debug(f"Discarding stale result for request {token.sequence}")
            return transitions.apply_observation(current, token, observation)

        current = self._update(apply)
        if self.state.observation is observation:
            save_debug_overlay(current)
        return current

    def _update(self, transition: Callable[[OverlayState], OverlayState]) -> OverlayState:
        with self._lock:
            previous = self._state
            self._state = transition(previous)
            current = self._state
            if current is not previous:
                self._version += 1
            version = self._version
        if current is not previous:
            self._publish(current, version)
        return current

    def _publish(self, new_state: OverlayState, version: int) -> None:
        """Deliver ``new_state`` unless a newer state has already gone out.

        A subscriber that changes the session mid-delivery publishes a newer
        version; the remaining subscribers then skip the superseded one.
        """
        with self._publish_lock:
            if version <= self._delivered_version:
                log.debug(f"Skipping superseded state version {version}")
                return
            self._delivered_version = version
            for callback in list(self._subscribers):
                if self._delivered_version != version:
                    return
                try:
                    callback(new_state)
                except Exception as exc:
                    log.error(f"State subscriber {callback!r} failed: {exc}")
