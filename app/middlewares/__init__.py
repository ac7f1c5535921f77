from .request_id_middleware import RequestIDMiddleware, REQUEST_ID_HEADER
from .security_middleware import SecurityHeadersMiddleware

__all__ = [
    "RequestIDMiddleware",
    "REQUEST_ID_HEADER",
    "SecurityHeadersMiddleware",
]
