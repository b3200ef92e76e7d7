"""
Liquidation monitor.

One scan walks every loan id in ascending order, one at a time, and submits
a liquidation for each active, funded loan whose collateral is worth less
than 105% of its principal at the ledger's current price. Errors are
contained to the loan (or, for the loan count, the cycle) they occur in.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Optional, Set

from .collateral import (
    collateral_value, collateralization_ratio, is_undercollateralized, liquidation_threshold
)
from .interfaces import ILoanLedger
from .metrics import (
    LIQUIDATION_ATTEMPTS_TOTAL, LOANS_EVALUATED_TOTAL, REPEATED_FAILURES,
    SCAN_DURATION_SECONDS, SCANS_TOTAL
)
from .models import Loan, LoanEvaluation, ScanReport
from .types import (
    ActionRejectedError, ConnectivityError, DecodingError, LoanNotFoundError, LoanOutcome
)
from .utils import format_wei

logger = logging.getLogger(__name__)


class FailureTracker:
    """
    Counts consecutive failed liquidation attempts per loan across scans.

    A single failure is expected (another liquidator got there first, the
    borrower repaid). A loan that keeps failing past `threshold` scans is
    flagged as suspicious.
    """

    def __init__(self, threshold: int = 3):
        self.threshold = threshold
        self._failures: Dict[int, int] = {}

    def record_failure(self, loan_id: int, reason: str) -> int:
        count = self._failures.get(loan_id, 0) + 1
        self._failures[loan_id] = count
        if count == self.threshold:
            logger.error(
                f"liquidation of loan #{loan_id} failed {count} consecutive times",
                extra={"loan_id": loan_id, "consecutive_failures": count, "reason": reason}
            )
        REPEATED_FAILURES.set(len(self.flagged))
        return count

    def clear(self, loan_id: int) -> None:
        if self._failures.pop(loan_id, None) is not None:
            REPEATED_FAILURES.set(len(self.flagged))

    def consecutive_failures(self, loan_id: int) -> int:
        return self._failures.get(loan_id, 0)

    @property
    def flagged(self) -> Set[int]:
        return {loan_id for loan_id, count in self._failures.items() if count >= self.threshold}


class LiquidationMonitor:
    """Scans the ledger and liquidates under-collateralized loans"""

    def __init__(self, ledger: ILoanLedger, failure_tracker: Optional[FailureTracker] = None):
        self.ledger = ledger
        self.failure_tracker = failure_tracker or FailureTracker()

    async def scan_once(self) -> ScanReport:
        """Run one complete scan cycle"""
        report = ScanReport(started_at=datetime.now(timezone.utc))
        logger.info("scanning")

        try:
            report.loan_count = await self.ledger.loan_count()
        except (ConnectivityError, DecodingError) as e:
            logger.warning(f"scan aborted, could not read loan count: {e}")
            return self._finish(report, error=str(e))
        except Exception as e:
            logger.exception(f"scan aborted by unexpected error: {e}")
            return self._finish(report, error=str(e))

        for loan_id in range(1, report.loan_count + 1):
            evaluation = await self._evaluate_safely(loan_id)
            report.evaluations.append(evaluation)
            LOANS_EVALUATED_TOTAL.labels(outcome=evaluation.outcome.value).inc()

        return self._finish(report)

    def _finish(self, report: ScanReport, error: Optional[str] = None) -> ScanReport:
        report.finished_at = datetime.now(timezone.utc)
        if error is not None:
            report.aborted = True
            report.error = error
            SCANS_TOTAL.labels(outcome="aborted").inc()
        else:
            SCANS_TOTAL.labels(outcome="completed").inc()
            logger.info(
                f"scan finished: {report.loan_count} loan(s), "
                f"{len(report.liquidated)} liquidated, {len(report.failed)} failed",
                extra={"loan_count": report.loan_count, "duration": report.duration_seconds}
            )
        SCAN_DURATION_SECONDS.observe(report.duration_seconds)
        return report

    async def _evaluate_safely(self, loan_id: int) -> LoanEvaluation:
        try:
            return await self.evaluate_loan(loan_id)
        except Exception as e:
            logger.exception(f"unexpected error evaluating loan #{loan_id}: {e}", extra={"loan_id": loan_id})
            return LoanEvaluation(loan_id=loan_id, outcome=LoanOutcome.ERROR, reason=str(e))

    async def evaluate_loan(self, loan_id: int) -> LoanEvaluation:
        """Check one loan and liquidate it if it is under-collateralized"""
        try:
            loan = await self.ledger.get_loan(loan_id)
        except LoanNotFoundError:
            logger.debug(f"loan #{loan_id} not found, skipping")
            self.failure_tracker.clear(loan_id)
            return LoanEvaluation(loan_id=loan_id, outcome=LoanOutcome.NOT_FOUND)
        except (ConnectivityError, DecodingError) as e:
            logger.warning(f"could not read loan #{loan_id}: {e}", extra={"loan_id": loan_id})
            return LoanEvaluation(loan_id=loan_id, outcome=LoanOutcome.ERROR, reason=str(e))

        if not loan.is_eligible:
            self.failure_tracker.clear(loan_id)
            return LoanEvaluation(loan_id=loan_id, outcome=LoanOutcome.INELIGIBLE)

        try:
            price = await self.ledger.current_collateral_price()
        except (ConnectivityError, DecodingError) as e:
            logger.warning(f"could not read collateral price for loan #{loan_id}: {e}",
                           extra={"loan_id": loan_id})
            return LoanEvaluation(loan_id=loan_id, outcome=LoanOutcome.ERROR, reason=str(e))

        value = collateral_value(loan.collateral_amount, price)
        evaluation = LoanEvaluation(
            loan_id=loan_id,
            outcome=LoanOutcome.HEALTHY,
            collateral_value=value,
            threshold=liquidation_threshold(loan.amount),
            collateral_ratio=collateralization_ratio(loan, price),
        )

        if not is_undercollateralized(loan, price):
            self.failure_tracker.clear(loan_id)
            return evaluation

        logger.warning(
            f"detected under-collateralized loan #{loan_id}",
            extra={
                "loan_id": loan_id,
                "collateral_value": str(format_wei(value)),
                "threshold": str(format_wei(evaluation.threshold)),
                "collateral_ratio": str(evaluation.collateral_ratio),
            }
        )
        return await self._liquidate(loan, evaluation)

    async def _liquidate(self, loan: Loan, evaluation: LoanEvaluation) -> LoanEvaluation:
        evaluation.outcome = LoanOutcome.LIQUIDATION_FAILED
        try:
            receipt = await self.ledger.liquidate(loan.id)
        except ActionRejectedError as e:
            # lost the race to another liquidator, or the loan was repaid
            LIQUIDATION_ATTEMPTS_TOTAL.labels(result="rejected").inc()
            logger.info(f"liquidation failed #{loan.id}: {e}", extra={"loan_id": loan.id, "reason": str(e)})
            evaluation.reason = str(e)
        except ConnectivityError as e:
            LIQUIDATION_ATTEMPTS_TOTAL.labels(result="connectivity").inc()
            logger.warning(f"liquidation failed #{loan.id}: {e}", extra={"loan_id": loan.id, "reason": str(e)})
            evaluation.reason = str(e)
        except Exception as e:
            LIQUIDATION_ATTEMPTS_TOTAL.labels(result="error").inc()
            logger.exception(f"liquidation failed #{loan.id}: {e!r}", extra={"loan_id": loan.id, "reason": repr(e)})
            evaluation.reason = repr(e)
        else:
            LIQUIDATION_ATTEMPTS_TOTAL.labels(result="succeeded").inc()
            logger.info(f"liquidation succeeded #{loan.id}",
                        extra={"loan_id": loan.id, "tx_hash": receipt.transaction_hash})
            self.failure_tracker.clear(loan.id)
            evaluation.outcome = LoanOutcome.LIQUIDATED
            evaluation.transaction_hash = receipt.transaction_hash
            return evaluation

        self.failure_tracker.record_failure(loan.id, evaluation.reason)
        return evaluation
