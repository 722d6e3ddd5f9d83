"""
Module: metrics.py
Description: CloudWatch metrics for webhook verification and delivery.

Each receiver or sender outcome is published as one PutMetricData call
carrying every datum for that outcome, dimensioned by event name or
rejection reason.

Key Components:
- MetricsClient.webhook_verified(): accepted webhook, with handler failures
- MetricsClient.webhook_rejected(): verification failure by reason
- MetricsClient.webhook_duplicate(): replayed message acknowledged
- MetricsClient.delivery_completed(): outbound send outcome and attempts
- Metric failures are logged and never fail the request

Dependencies: boto3, botocore, typing, logger
Author: HookRelay Team
"""

from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .logger import get_logger

logger = get_logger(__name__)

MetricDatum = Dict[str, Any]


def _datum(name: str, value: float = 1.0, unit: str = "Count", **dimensions: str) -> MetricDatum:
    datum: MetricDatum = {"MetricName": name, "Value": value, "Unit": unit}
    if dimensions:
        datum["Dimensions"] = [{"Name": key, "Value": str(val)} for key, val in dimensions.items()]
    return datum


class MetricsClient:
    """CloudWatch publisher for webhook outcomes."""

    def __init__(self, namespace: str = "HookRelay", region_name: Optional[str] = None):
        """
        Initialize metrics client.

        Args:
            namespace: CloudWatch metrics namespace
            region_name: AWS region (defaults to the boto3 session region)
        """
        self.namespace = namespace
        self.cloudwatch = boto3.client("cloudwatch", region_name=region_name)

    def webhook_verified(self, event: str, handler_errors: int = 0) -> None:
        """Record an accepted webhook and how many of its handlers failed."""
        data = [_datum("WebhookVerified", Event=event)]
        if handler_errors:
            data.append(_datum("WebhookHandlerErrors", float(handler_errors), Event=event))
        self._publish(data)

    def webhook_rejected(self, reason: str) -> None:
        """Record a webhook that failed verification."""
        self._publish([_datum("WebhookRejected", Reason=reason)])

    def webhook_duplicate(self, event: str) -> None:
        """Record an acknowledged duplicate."""
        self._publish([_datum("WebhookDuplicate", Event=event)])

    def delivery_completed(self, event: str, success: bool, attempts: int) -> None:
        """Record the terminal outcome of an outbound send."""
        outcome = "WebhookDelivered" if success else "WebhookDeliveryFailed"
        self._publish([
            _datum(outcome, Event=event),
            _datum("WebhookDeliveryAttempts", float(attempts), Event=event),
        ])

    def _publish(self, metric_data: List[MetricDatum]) -> None:
        try:
            self.cloudwatch.put_metric_data(Namespace=self.namespace, MetricData=metric_data)
        except (BotoCoreError, ClientError) as e:
            logger.warning(
                "Failed to publish webhook metrics",
                metrics=[datum["MetricName"] for datum in metric_data],
                error=str(e),
                namespace=self.namespace,
            )
            return

        logger.debug(
            "Webhook metrics published",
            metrics=[datum["MetricName"] for datum in metric_data],
            namespace=self.namespace,
        )
