"""Generic driver for processing stages.

StageRunner selects every deposit waiting in a stage's input state, hands
each package to the stage's processor, and moves the deposit to the stage's
success or error state. Deposits are independent: one deposit failing, or
its processor blowing up, never stops the rest of the run. Each transition
is persisted before the next deposit is looked at, so an interrupted run
leaves finished deposits where they belong and unfinished ones waiting to
be picked up again.
"""

import logging
from dataclasses import dataclass, field

from pln_staging.stores.deposit_store import DepositStore
from pln_staging.stores.exceptions import StoreError
from schemas.deposit import Deposit

from .stage import ProcessingStage, StageVerdict

logger = logging.getLogger(__name__)


@dataclass
class StageReport:
    """What happened during one stage run.

    Attributes:
        stage: Name of the stage that ran
        succeeded: Ids of deposits moved to the success state
        failed: Ids of deposits moved to the error state
        conflicts: Ids of deposits another worker moved first
        errors: Diagnostics for each failed or unpersisted deposit
        dry_run: True if no transitions were applied
    """

    stage: str
    succeeded: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    conflicts: list[str] = field(default_factory=list)
    errors: dict[str, list[str]] = field(default_factory=dict)
    dry_run: bool = False

    @property
    def processed(self) -> int:
        return len(self.succeeded) + len(self.failed)


class StageRunner:
    """Run processing stages against a deposit store.

    Attributes:
        store: Store holding the deposits
    """

    def __init__(self, store: DepositStore):
        self.store = store

    def run(
        self,
        stage: ProcessingStage,
        retry: bool = False,
        deposit_ids: list[str] | None = None,
        limit: int | None = None,
        dry_run: bool = False,
    ) -> StageReport:
        """Process every eligible deposit once.

        Args:
            stage: The stage to run
            retry: Select deposits from the stage's error state instead of
                   its processing state
            deposit_ids: Only consider deposits with these ids
            limit: Process at most this many deposits
            dry_run: Run the processor but do not change any deposit

        Returns:
            StageReport describing each deposit's outcome
        """
        input_state = stage.error_state if retry else stage.processing_state
        deposits = self.store.find(input_state, deposit_ids=deposit_ids, limit=limit)
        logger.info(f"{stage.name}: {len(deposits)} deposit(s) in {input_state}")

        report = StageReport(stage=stage.name, dry_run=dry_run)
        for deposit in deposits:
            self.run_deposit(stage, deposit, report, dry_run=dry_run)

        logger.info(
            f"{stage.name}: {len(report.succeeded)} succeeded, "
            f"{len(report.failed)} failed, {len(report.conflicts)} conflicts"
        )
        return report

    def run_deposit(
        self,
        stage: ProcessingStage,
        deposit: Deposit,
        report: StageReport,
        dry_run: bool = False,
    ) -> None:
        """Process a single deposit and record the outcome in *report*."""
        verdict = self._judge(stage, deposit)

        if verdict.ok:
            deposit.write_log(stage.success_message, "INFO", stage.name)
            new_state = stage.next_state
        else:
            deposit.add_errors(verdict.diagnostics)
            deposit.write_log(stage.failure_message, "ERROR", stage.name)
            new_state = stage.error_state

        if dry_run:
            logger.info(f"{stage.name}: dry run, deposit {deposit.id} would move to {new_state}")
            self._record(report, deposit, verdict)
            return

        try:
            moved = self.store.transition(deposit, new_state)
        except (OSError, StoreError) as e:
            logger.error(
                f"{stage.name}: could not save deposit {deposit.id}: {e}",
                extra={"deposit_id": deposit.id, "stage": stage.name},
            )
            report.errors[deposit.id] = [f"could not save deposit: {e}"]
            return

        if not moved:
            report.conflicts.append(deposit.id)
            return

        if verdict.ok:
            logger.info(
                f"{stage.success_message} Deposit {deposit.id}",
                extra={"deposit_id": deposit.id, "stage": stage.name},
            )
        else:
            logger.error(
                f"{stage.failure_message} Deposit {deposit.id}: "
                + "; ".join(verdict.diagnostics),
                extra={"deposit_id": deposit.id, "stage": stage.name},
            )
        self._record(report, deposit, verdict)

    def _judge(self, stage: ProcessingStage, deposit: Deposit) -> StageVerdict:
        """Run the stage processor, turning any fault into a failed verdict."""
        if not deposit.package_path:
            return StageVerdict(ok=False, diagnostics=["Deposit has no package location"])
        try:
            return stage.processor.validate(deposit.package_path)
        except Exception as e:
            return StageVerdict(
                ok=False,
                diagnostics=[f"in {stage.name}: {e.__class__.__name__}: {e}"],
            )

    def _record(self, report: StageReport, deposit: Deposit, verdict: StageVerdict) -> None:
        if verdict.ok:
            report.succeeded.append(deposit.id)
        else:
            report.failed.append(deposit.id)
            report.errors[deposit.id] = list(verdict.diagnostics)
