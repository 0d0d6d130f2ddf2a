"""
Admin API Key Decorator

Guards administrative endpoints with a shared secret header.
"""

import hmac
from functools import wraps

from flask import current_app, request

from filevault.domain.errors import ErrorCategory, create_error_response

API_KEY_HEADER = "X-API-Key"


def require_api_key(f):
    """
    Decorator rejecting requests whose X-API-Key header does not match.

    Missing header, wrong key and an unconfigured key all produce the same
    403 response.

    Usage:
        @require_api_key
        def get(self):
            pass
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        expected = current_app.config.get("ADMIN_API_KEY")
        provided = request.headers.get(API_KEY_HEADER, "")

        if not expected or not hmac.compare_digest(
            provided.encode("utf-8"), expected.encode("utf-8")
        ):
            current_app.logger.warning(
                f"Rejected admin request {request.method} {request.path} "
                f"from {request.remote_addr}"
            )
            return create_error_response(
                ErrorCategory.FORBIDDEN, "Admin API key rejected", status_code=403
            )

        return f(*args, **kwargs)

    return decorated_function
