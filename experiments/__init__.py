"""
Experiments Module
==================

This module provides scripts for running goodness-of-fit assessments.

Scripts
-------
run_assessment
    Assess candidate random graph models against a bundled network
"""

__all__ = [
    "run_assessment",
]
