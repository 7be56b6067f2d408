from prometheus_client import Counter, Histogram

# Low-cardinality labels only: operation names, never bucket or key.
REQUESTS = Counter(
    "s3lite_requests_total",
    "Total object store requests",
    ["operation", "method", "status"],
)

LATENCY = Histogram(
    "s3lite_request_duration_seconds",
    "Object store round trip latency in seconds",
    ["operation", "method"],
)
