"""
Prometheus metrics for the liquidation bot.
"""

from prometheus_client import Counter, Gauge, Histogram

SCANS_TOTAL = Counter(
    'loan_liquidator_scans_total',
    'Scan cycles run, by outcome',
    ['outcome']
)
TICKS_SKIPPED_TOTAL = Counter(
    'loan_liquidator_ticks_skipped_total',
    'Scheduler ticks skipped because a scan was still in flight'
)
LOANS_EVALUATED_TOTAL = Counter(
    'loan_liquidator_loans_evaluated_total',
    'Loans visited during scans, by outcome',
    ['outcome']
)
LIQUIDATION_ATTEMPTS_TOTAL = Counter(
    'loan_liquidator_liquidation_attempts_total',
    'Liquidation transactions submitted, by result',
    ['result']
)
SCAN_DURATION_SECONDS = Histogram(
    'loan_liquidator_scan_duration_seconds',
    'Duration of a complete scan cycle in seconds'
)
REPEATED_FAILURES = Gauge(
    'loan_liquidator_repeated_failures',
    'Loans whose liquidation has failed in several consecutive cycles'
)
