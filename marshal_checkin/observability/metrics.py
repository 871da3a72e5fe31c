"""
Metrics definitions for the marshal check-in service.

This module defines Prometheus metrics for check-ins, checkpoint imports,
area and layer recalculation and contact permission resolution.
"""

from prometheus_client import Counter, Histogram, Gauge

# counters
check_ins_total = Counter(
    "check_ins_total",
    "Number of accepted check-ins",
    ["method"]
)

check_ins_rejected = Counter(
    "check_ins_rejected_total",
    "Number of rejected check-in attempts",
    ["reason"]
)

checkpoints_imported = Counter(
    "checkpoints_imported_total",
    "Number of checkpoint rows parsed from import files",
    ["source"]
)

import_row_errors = Counter(
    "import_row_errors_total",
    "Number of rows rejected during checkpoint import"
)

area_recalculations = Counter(
    "area_recalculations_total",
    "Number of locations whose area membership changed"
)

layer_recalculations = Counter(
    "layer_recalculations_total",
    "Number of auto-mode locations whose route layers changed"
)

# histograms
permission_resolve_seconds = Histogram(
    "permission_resolve_duration_seconds",
    "Time spent resolving contact permissions",
    buckets=[0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5]
)

check_in_distance_m = Histogram(
    "check_in_distance_meters",
    "Distance between reported GPS position and checkpoint",
    buckets=[5, 10, 25, 50, 100, 250, 1000, 10000]
)

# gauges
uptime_seconds = Gauge(
    "uptime_seconds",
    "Service uptime in seconds"
)
