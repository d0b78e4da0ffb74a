"""
Recomputation pipeline: parameters in, renderable frame out.

Plate parameters are an immutable value. The caller holds the current
PlateParams, derives a new one on every change and asks the simulator for a
fresh Frame; nothing is updated incrementally.
"""

import dataclasses
import logging
from dataclasses import dataclass
from typing import Union

import numpy as np
from numpy.typing import NDArray

from .mapping import BlendDescriptor, compute_blend
from .modes import DEFAULT_MAX_INDEX, ModeCatalog, Shape, build_catalog, parse_shape
from .sampler import (
    DEFAULT_NODE_THRESHOLD,
    DEFAULT_RESOLUTION,
    SampledField,
    Viewport,
    sample_field,
)
from .summary import ModeSummary, summarize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlateParams:
    """Shape, relative size and drive frequency of the plate."""
    shape: Shape = Shape.SQUARE
    plate_size: float = 0.9
    freq_hz: float = 440.0

    def __post_init__(self):
        object.__setattr__(self, "shape", parse_shape(self.shape))

    def with_changes(self, **changes) -> "PlateParams":
        """Return a copy with some fields replaced."""
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_config(cls, config) -> "PlateParams":
        return cls(
            shape=config.plate.shape,
            plate_size=config.plate.plate_size,
            freq_hz=config.plate.freq_hz,
        )


@dataclass
class Frame:
    """Everything a renderer needs for one set of parameters."""
    params: PlateParams
    blend: BlendDescriptor
    field: SampledField
    summary: ModeSummary

    def pixel_points(self, viewport: Viewport) -> NDArray[np.float64]:
        return self.field.pixel_points(viewport)


class PlateSimulator:
    """
    Owns one mode catalog per shape and turns parameters into frames.

    Catalogs are built on first use and kept for the simulator's lifetime.
    A catalog's eigen frequencies are rescaled only when a frame is
    requested at a different plate size.
    """

    def __init__(
        self,
        resolution: int = DEFAULT_RESOLUTION,
        node_threshold: float = DEFAULT_NODE_THRESHOLD,
        max_m: int = DEFAULT_MAX_INDEX,
        max_n: int = DEFAULT_MAX_INDEX
    ):
        if resolution < 2:
            raise ValueError("resolution must be at least 2")
        if node_threshold < 0:
            raise ValueError("node_threshold must be non-negative")
        self.resolution = resolution
        self.node_threshold = node_threshold
        self.max_m = max_m
        self.max_n = max_n
        self._catalogs: dict[Shape, ModeCatalog] = {}

    @classmethod
    def from_config(cls, config) -> "PlateSimulator":
        return cls(
            resolution=config.sampling.resolution,
            node_threshold=config.sampling.node_threshold,
            max_m=config.catalog.max_m,
            max_n=config.catalog.max_n,
        )

    def catalog(self, shape: Union[str, Shape]) -> ModeCatalog:
        """Mode catalog for a shape, built once."""
        shape = parse_shape(shape)
        if shape not in self._catalogs:
            self._catalogs[shape] = build_catalog(shape, self.max_m, self.max_n)
        return self._catalogs[shape]

    def catalog_for(self, params: PlateParams) -> ModeCatalog:
        """Catalog for the parameters' shape, rescaled to their plate size."""
        catalog = self.catalog(params.shape)
        if catalog.plate_size != params.plate_size:
            catalog.set_plate_size(params.plate_size)
        return catalog

    def blend(self, params: PlateParams) -> BlendDescriptor:
        catalog = self.catalog_for(params)
        return compute_blend(params.shape, params.freq_hz, params.plate_size, catalog)

    def compute(self, params: PlateParams) -> Frame:
        """
        Recompute blend, sampled field and summary for a parameter set.

        Parameters
        ----------
        params : PlateParams
            Parameters for this frame.

        Returns
        -------
        frame : Frame
            Freshly computed blend, field and summary.
        """
        catalog = self.catalog_for(params)
        blend = compute_blend(params.shape, params.freq_hz, params.plate_size, catalog)
        field = sample_field(
            blend,
            params.shape,
            params.plate_size,
            resolution=self.resolution,
            threshold_fraction=self.node_threshold,
        )
        summary = summarize(blend, catalog)

        logger.debug(
            "Frame %s L=%.3f f=%.1f Hz: p=%.3f, %d nodal points",
            params.shape.value, params.plate_size, blend.drive_frequency,
            blend.position, field.nodal_count
        )
        return Frame(params=params, blend=blend, field=field, summary=summary)
