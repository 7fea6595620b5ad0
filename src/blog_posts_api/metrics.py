"""Shared OTel metrics instruments for the service."""

from opentelemetry import metrics

METER_NAME = "blog_posts_api"

meter = metrics.get_meter(METER_NAME)

posts_requests_total = meter.create_counter(
    name="posts_requests_total",
    description="Post API requests by operation and outcome",
    unit="1",
)

store_errors_total = meter.create_counter(
    name="store_errors_total",
    description="Post store operations that failed to reach the store",
    unit="1",
)

store_operation_duration = meter.create_histogram(
    name="store_operation_duration_seconds",
    description="Duration of post store operations",
    unit="s",
)
