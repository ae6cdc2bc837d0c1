"""The pipeline's processing stages."""

from .bag_validator import BagValidator
from .stage import ProcessingStage, StageProcessor


def bag_validation_stage(processor: StageProcessor | None = None) -> ProcessingStage:
    """Validate bag metadata and checksums of payload-validated deposits."""
    return ProcessingStage(
        name="validate-bag",
        processing_state="payload-validated",
        next_state="bag-validated",
        error_state="bag-error",
        success_message="Bag checksum validation succeeded.",
        failure_message="Bag checksum validation failed.",
        processor=processor or BagValidator(),
    )


# Stage factories by command name.
STAGES = {
    "validate-bag": bag_validation_stage,
}
