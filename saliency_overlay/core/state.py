"""Value-based overlay state and its transitions.

Every transition is a pure function returning a new :class:`OverlayState`.
Analysis requests are tagged with a :class:`RequestToken`; a completion whose
token no longer matches the pending one belongs to an image or mode the user
has moved away from and is dropped.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from PIL import Image

from ..vision.geometry import compute_geometry
from ..vision.models import (
    DisplayState,
    OverlayGeometry,
    Rect,
    SaliencyMode,
    SaliencyObservation,
    SourceImage,
)
from ..vision.orchestrator import build_artifacts, build_path


@dataclass(frozen=True)
class RequestToken:
    """Identity of one analysis request."""

    image_id: str
    mode: SaliencyMode
    sequence: int


@dataclass(frozen=True)
class OverlayState:
    """Everything the presentation layer needs to draw the overlay."""

    image: Optional[SourceImage] = None
    display_rect: Optional[Rect] = None
    geometry: Optional[OverlayGeometry] = None
    display_state: DisplayState = DisplayState.NONE
    observation: Optional[SaliencyObservation] = None
    heat_map: Optional[Image.Image] = None
    path: tuple[Rect, ...] = ()
    pending: Optional[RequestToken] = None
    sequence: int = 0

    @property
    def placement_rect(self) -> Optional[Rect]:
        return self.geometry.placement_rect if self.geometry else None

    @property
    def has_overlay(self) -> bool:
        return self.heat_map is not None or bool(self.path)


def _geometry_for(image: Optional[SourceImage], display_rect: Optional[Rect]) -> Optional[OverlayGeometry]:
    if image is None or display_rect is None:
        return None
    return compute_geometry(image.size, display_rect)


def _cleared(state: OverlayState) -> OverlayState:
    return replace(
        state,
        display_state=DisplayState.NONE,
        observation=None,
        heat_map=None,
        path=(),
        pending=None,
    )


def select_image(state: OverlayState, image: SourceImage) -> OverlayState:
    """Replace the current image; any overlay or in-flight request is dropped."""
    cleared = _cleared(state)
    return replace(cleared, image=image, geometry=_geometry_for(image, state.display_rect))


def reset(state: OverlayState) -> OverlayState:
    """Return to :attr:`DisplayState.NONE` with no overlay."""
    return _cleared(state)


def request_analysis(
    state: OverlayState,
    mode: SaliencyMode,
) -> tuple[OverlayState, Optional[RequestToken]]:
    """Start a new analysis for the current image.

    Returns the unchanged state and ``None`` when there is no image.
    """
    if state.image is None:
        return state, None

    sequence = state.sequence + 1
    token = RequestToken(image_id=state.image.image_id, mode=mode, sequence=sequence)
    return replace(_cleared(state), pending=token, sequence=sequence), token


def apply_observation(
    state: OverlayState,
    token: RequestToken,
    observation: SaliencyObservation,
) -> OverlayState:
    """Publish an analysis result if it still answers the pending request."""
    if token != state.pending:
        return state

    artifacts = build_artifacts(observation, state.geometry)
    return replace(
        state,
        display_state=DisplayState.for_mode(token.mode),
        observation=observation,
        heat_map=artifacts.heat_map,
        path=artifacts.path,
        pending=None,
    )


def apply_failure(state: OverlayState, token: RequestToken) -> OverlayState:
    """Clear the overlay after a failed request, unless the request is stale."""
    if token != state.pending:
        return state
    return _cleared(state)


def relayout(state: OverlayState, display_rect: Rect) -> OverlayState:
    """Recompute geometry for a new display rect, reusing the observation."""
    geometry = _geometry_for(state.image, display_rect)
    if state.observation is None:
        return replace(state, display_rect=display_rect, geometry=geometry)

    return replace(
        state,
        display_rect=display_rect,
        geometry=geometry,
        path=build_path(state.observation, geometry),
    )
