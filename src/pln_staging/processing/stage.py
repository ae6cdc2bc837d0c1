"""Processing stage contract.

A stage is described by data rather than by subclassing: a ProcessingStage
names the state a deposit must be in to be picked up, where it goes on
success and on failure, the messages logged for each outcome, and the
StageProcessor that inspects the package. All state handling lives in
StageRunner; processors only judge content.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass
class StageVerdict:
    """Outcome of a stage processor.

    Attributes:
        ok: True if the package passed the stage
        diagnostics: Human-readable details, mostly for failures
        metadata: Values read from the package that callers may want
    """

    ok: bool
    diagnostics: list[str] = field(default_factory=list)
    metadata: dict[str, str] = field(default_factory=dict)


class StageProcessor(ABC):
    """Verification or transform logic for exactly one stage.

    Implementations must not touch deposit records. Problems with the package
    itself (unreadable, malformed, corrupt) are reported as a non-ok verdict
    rather than raised.
    """

    @abstractmethod
    def validate(self, package_ref: str) -> StageVerdict:
        """Judge the package at *package_ref*.

        Args:
            package_ref: Location of the deposit's package

        Returns:
            StageVerdict with the pass/fail outcome and diagnostics
        """
        pass


@dataclass(frozen=True)
class ProcessingStage:
    """Configuration of one pipeline stage.

    Attributes:
        name: Short stage name used in logs
        processing_state: State a deposit must be in to be processed
        next_state: State a deposit moves to when the stage succeeds
        error_state: State a deposit moves to when the stage fails
        success_message: Logged when a deposit passes
        failure_message: Logged when a deposit fails
        processor: Processor that judges each package
    """

    name: str
    processing_state: str
    next_state: str
    error_state: str
    success_message: str
    failure_message: str
    processor: StageProcessor
