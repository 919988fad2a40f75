"""Prometheus metrics for the notification dispatch pipeline.

Usage:
    from dispatch_service.features.notifications.metrics import (
        notification_delivered_total,
    )

    notification_delivered_total.labels(channel="email", status="delivered").inc()
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

# =============================================================================
# Notification Lifecycle Metrics
# =============================================================================

notification_created_total = Counter(
    "notification_created_total",
    "Total number of notifications submitted",
    labelnames=["notification_type"],
)

notification_delivered_total = Counter(
    "notification_delivered_total",
    "Total number of delivery attempts by channel and outcome",
    labelnames=["channel", "status"],
)
"""
Labels:
    channel: Delivery channel (email, sms, in-app)
    status: Attempt outcome (delivered, failed)
"""

# =============================================================================
# Delivery Performance Metrics
# =============================================================================

notification_delivery_duration_seconds = Histogram(
    "notification_delivery_duration_seconds",
    "Notification delivery attempt duration in seconds",
    labelnames=["channel"],
    buckets=[0.005, 0.05, 0.1, 0.25, 0.5, 0.75, 1.0, 2.5, 5.0],
)

# =============================================================================
# Retry Metrics
# =============================================================================

notification_retry_total = Counter(
    "notification_retry_total",
    "Total number of re-queued delivery attempts",
    labelnames=["channel", "source"],
)
"""
Labels:
    channel: Delivery channel
    source: What re-queued the notification (manual, sweep)
"""

notification_retry_exhausted_total = Counter(
    "notification_retry_exhausted_total",
    "Failed notifications skipped by the sweep because they hit the retry cap",
    labelnames=["channel"],
)

# =============================================================================
# Error Metrics
# =============================================================================

notification_errors_total = Counter(
    "notification_errors_total",
    "Delivery errors by channel and category",
    labelnames=["channel", "error_category"],
)
"""
Labels:
    channel: Delivery channel
    error_category: rejected (transport returned False), transport, exception, configuration
"""
