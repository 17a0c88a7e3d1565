from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# HTTP
http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint']
)

# Кэш
cache_hits_total = Counter('cache_hits_total', 'Total cache hits')
cache_misses_total = Counter('cache_misses_total', 'Total cache misses')

# Доменные события
session_joins_total = Counter(
    'session_joins_total',
    'Self-join attempts by outcome',
    ['outcome']
)
access_denied_total = Counter(
    'access_denied_total',
    'Requests denied by role, permission or eligibility checks',
    ['route']
)
attendance_upserts_total = Counter(
    'attendance_upserts_total',
    'Attendance records written by mentor bulk updates'
)
calendar_feed_requests_total = Counter(
    'calendar_feed_requests_total',
    'Calendar feed requests by outcome',
    ['outcome']
)


def metrics_endpoint():
    """Endpoint для Prometheus метрик"""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
