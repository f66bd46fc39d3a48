"""
Discrepancy Telemetry Module

Records comparison outcomes between the reference and candidate SDP
parsers and publishes them as CloudWatch metrics.

- Category-keyed counters, one bump per discrepancy instance
- Structured discrepancy records for diagnostic reports
- Batched CloudWatch publishing under the sdp-parser-diff namespace
"""

import logging
from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass, asdict, field
from datetime import datetime, timezone
from typing import Dict, Any, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from sdpdiff.exceptions import MetricsPublishError


def _get_iso_timestamp() -> str:
    """Get current UTC timestamp in ISO format."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass
class Discrepancy:
    """A single divergence between the reference and candidate documents."""

    category: str
    level: Optional[int] = None  # -1 session, 0..N-1 media section, None document-wide
    reference_value: Optional[str] = None
    candidate_value: Optional[str] = None
    original_value: Optional[str] = None
    message: str = ""
    timestamp: str = field(default_factory=_get_iso_timestamp)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


class DiscrepancyRecorder(ABC):
    """
    Side channel the comparer reports into.

    increment() is the counter bump. record() keeps the full discrepancy
    for reports and bumps its category.
    """

    def record(self, discrepancy: Discrepancy) -> None:
        self._store(discrepancy)
        self.increment(discrepancy.category)

    @abstractmethod
    def increment(self, category: str, count: int = 1) -> None:
        """Add count to the counter for category."""

    @abstractmethod
    def _store(self, discrepancy: Discrepancy) -> None:
        """Keep a discrepancy record."""

    @abstractmethod
    def counts(self) -> Dict[str, int]:
        """Current value of every counter that has been bumped."""

    @abstractmethod
    def discrepancies(self) -> List[Discrepancy]:
        """Discrepancy records in the order they were recorded."""

    @abstractmethod
    def reset(self) -> None:
        """Drop all counters and records."""


class InMemoryDiscrepancyRecorder(DiscrepancyRecorder):
    """Keeps counters and records in process memory."""

    def __init__(self) -> None:
        self._counts: Counter = Counter()
        self._discrepancies: List[Discrepancy] = []

    def increment(self, category: str, count: int = 1) -> None:
        self._counts[category] += count

    def _store(self, discrepancy: Discrepancy) -> None:
        self._discrepancies.append(discrepancy)

    def counts(self) -> Dict[str, int]:
        return dict(self._counts)

    def discrepancies(self) -> List[Discrepancy]:
        return list(self._discrepancies)

    def reset(self) -> None:
        self._counts.clear()
        self._discrepancies.clear()


class CloudWatchDiscrepancyRecorder(InMemoryDiscrepancyRecorder):
    """
    Publishes discrepancy counters to CloudWatch.

    Counters accumulate in memory and go out on flush(), one Count metric
    per category with a Category dimension.
    """

    NAMESPACE = "webrtc/sdp-parser-diff"
    METRIC_NAME = "sdp_parser_diff"
    MAX_METRICS_PER_REQUEST = 20

    def __init__(
        self,
        region_name: str = "us-east-1",
        namespace: Optional[str] = None,
        cloudwatch_client=None,
    ):
        """
        Initialize metrics recorder.

        Args:
            region_name: AWS region for CloudWatch
            namespace: Metric namespace; defaults to NAMESPACE
            cloudwatch_client: Preconfigured boto3 CloudWatch client
        """
        super().__init__()
        self.region_name = region_name
        self.namespace = namespace or self.NAMESPACE
        self.cloudwatch_client = cloudwatch_client or boto3.client(
            "cloudwatch", region_name=region_name
        )
        self.logger = logging.getLogger(__name__)

    def _build_metric_data(self) -> List[Dict[str, Any]]:
        timestamp = datetime.now(timezone.utc)
        return [
            {
                "MetricName": self.METRIC_NAME,
                "Value": count,
                "Unit": "Count",
                "Timestamp": timestamp,
                "Dimensions": [{"Name": "Category", "Value": category}],
            }
            for category, count in sorted(self._counts.items())
        ]

    def _put_metric_data(self, batch: List[Dict[str, Any]]) -> None:
        try:
            self.cloudwatch_client.put_metric_data(Namespace=self.namespace, MetricData=batch)
        except (ClientError, BotoCoreError) as e:
            raise MetricsPublishError(f"CloudWatch put_metric_data failed: {e}") from e

    def flush(self) -> bool:
        """
        Publish accumulated counters to CloudWatch.

        Counters and discrepancy records are dropped once every batch was
        accepted. Read discrepancies() before flushing to report on them.

        Returns:
            True if everything was published (or there was nothing to publish)
        """
        metric_data = self._build_metric_data()
        if not metric_data:
            return True

        try:
            # CloudWatch limit: 20 metrics per request
            for i in range(0, len(metric_data), self.MAX_METRICS_PER_REQUEST):
                batch = metric_data[i : i + self.MAX_METRICS_PER_REQUEST]
                self._put_metric_data(batch)
                self.logger.debug(f"Published {len(batch)} metrics to CloudWatch")
        except MetricsPublishError as e:
            self.logger.error(f"Failed to publish discrepancy metrics: {e}")
            # Don't raise - metrics publishing should not fail the comparison run
            return False

        self.logger.info(
            f"Discrepancy metrics published: categories={len(metric_data)}, "
            f"total={sum(self._counts.values())}"
        )
        self.reset()
        return True
