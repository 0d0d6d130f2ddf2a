"""
API Models for request parsing and Swagger documentation
"""

from flask_restx import Model, fields, reqparse
from werkzeug.datastructures import FileStorage

# =============================================================================
# Request Parsers
# =============================================================================

upload_parser = reqparse.RequestParser()
upload_parser.add_argument(
    "file", type=FileStorage, location="files", help="File content to store"
)
upload_parser.add_argument(
    "password", type=str, location="form", help="Optional passphrase guarding the file"
)
upload_parser.add_argument(
    "message", type=str, location="form", help="Optional note attached to the file"
)

password_parser = reqparse.RequestParser()
password_parser.add_argument(
    "pass", type=str, location="args", help="Passphrase of a protected file"
)

# =============================================================================
# Response Models
# =============================================================================

file_record = Model(
    "FileRecord",
    {
        "id": fields.String(description="File identifier"),
        "createdAt": fields.String(description="Upload time (ISO timestamp)"),
        "path": fields.String(description="Blob location, ending in the file id"),
        "message": fields.String(description="Note attached by the uploader", allow_null=True),
        "expiresAt": fields.String(description="Scheduled expiry (ISO timestamp)"),
        "filename": fields.String(description="Original filename", allow_null=True),
        "size": fields.Integer(description="Size in bytes"),
    },
)

deleted_record = file_record.inherit(
    "DeletedFileRecord",
    {
        "blobMissing": fields.Boolean(
            description="True if the stored bytes were already gone at delete time"
        ),
    },
)

bulk_delete_response = Model(
    "BulkDeleteResponse",
    {
        "deleted": fields.Integer(description="Number of metadata records deleted"),
    },
)

error_response = Model(
    "ErrorResponse",
    {
        "error": fields.String(description="Error category"),
        "title": fields.String(description="Short error title"),
        "message": fields.String(description="User-facing error message"),
        "action": fields.String(description="Suggested next step"),
    },
)

ALL_MODELS = (file_record, deleted_record, bulk_delete_response, error_response)
