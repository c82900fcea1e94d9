"""
Generators Module
=================

This module provides the sample generator capability and adapters around
the standard NetworkX random graph models.

Submodules
----------
samplers
    SampleGenerator protocol, model adapters and observed-matched factories
"""

from .samplers import (
    SampleGenerator,
    draw_seed,
    seeded,
    zero_argument,
    erdos_renyi_gnm,
    erdos_renyi_gnp,
    configuration_model,
    small_world,
    preferential_attachment,
    degree_preserving_rewiring,
    gnm_like,
    gnp_like,
    configuration_like,
    small_world_like,
    preferential_attachment_like,
    check_scale,
    available_models,
    model_like,
)

__all__ = [
    "SampleGenerator",
    "draw_seed",
    "seeded",
    "zero_argument",
    # Model adapters
    "erdos_renyi_gnm",
    "erdos_renyi_gnp",
    "configuration_model",
    "small_world",
    "preferential_attachment",
    "degree_preserving_rewiring",
    # Matched to an observed graph
    "gnm_like",
    "gnp_like",
    "configuration_like",
    "small_world_like",
    "preferential_attachment_like",
    "check_scale",
    "available_models",
    "model_like",
]
