"""Conversion pipeline: transform, round trip and capability mappings."""

from cace.transformation.transformer import (
    RoundTripResult,
    TransformOptions,
    TransformResult,
    round_trip,
    transform,
    transform_spec,
)

__all__ = [
    "RoundTripResult",
    "TransformOptions",
    "TransformResult",
    "round_trip",
    "transform",
    "transform_spec",
]
