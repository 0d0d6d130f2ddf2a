"""
API v1 - filevault REST API

Versioned API endpoints with OpenAPI/Swagger documentation.
"""

import os

from flask import Blueprint
from flask_restx import Api

API_VERSION = os.getenv("API_VERSION", "v1")

api_v1_bp = Blueprint("api_v1", __name__, url_prefix=f"/api/{API_VERSION}")

api = Api(
    api_v1_bp,
    version="1.0",
    title="filevault API",
    description="Ephemeral file vault with optional password protection and automatic expiry",
    doc="/docs",  # Swagger UI at /api/v1/docs
    authorizations={
        "apikey": {"type": "apiKey", "in": "header", "name": "X-API-Key"},
    },
)

# Import namespaces after api is created to avoid circular imports
from .namespaces import file_ns  # noqa: E402

api.add_namespace(file_ns, path="/file")
