"""Manifest acquisition and classification pipeline."""

from enginetags.pipeline.orchestrator import Orchestrator
from enginetags.pipeline.runner import run_pipeline

__all__ = ["Orchestrator", "run_pipeline"]
