"""HTTP middleware: timeout, request ID, correlation/trace ID, security headers.

Applied in gatekeeper.main; order matters (last added = outermost).
"""

from gatekeeper.middleware.correlation_id import CorrelationIDMiddleware
from gatekeeper.middleware.request_id import RequestIDMiddleware
from gatekeeper.middleware.security_headers import SecurityHeadersMiddleware
from gatekeeper.middleware.timeout import TimeoutMiddleware

__all__ = [
    "CorrelationIDMiddleware",
    "RequestIDMiddleware",
    "SecurityHeadersMiddleware",
    "TimeoutMiddleware",
]
