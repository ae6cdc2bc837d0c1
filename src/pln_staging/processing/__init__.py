"""Deposit processing pipeline."""

from .bag_validator import BagValidator
from .runner import StageReport, StageRunner
from .stage import ProcessingStage, StageProcessor, StageVerdict
from .stages import STAGES, bag_validation_stage

__all__ = [
    "BagValidator",
    "ProcessingStage",
    "STAGES",
    "StageProcessor",
    "StageReport",
    "StageRunner",
    "StageVerdict",
    "bag_validation_stage",
]
