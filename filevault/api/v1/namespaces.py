"""
API Namespaces - Organized endpoint groups
"""

from flask import Response, current_app, request
from flask_restx import Namespace, Resource
from werkzeug.exceptions import RequestEntityTooLarge
from werkzeug.utils import secure_filename

from filevault.api.v1.auth import require_api_key
from filevault.api.v1.models import (
    ALL_MODELS,
    bulk_delete_response,
    deleted_record,
    error_response,
    file_record,
    password_parser,
    upload_parser,
)
from filevault.application.vault_service import VaultService
from filevault.domain.errors import (
    DomainError,
    ErrorCategory,
    create_error_response,
    error_response_for,
)

# =============================================================================
# File Namespace - Upload, lookup, download and deletion
# =============================================================================

file_ns = Namespace("file", description="Ephemeral file operations")

for _model in ALL_MODELS:
    file_ns.add_model(_model.name, _model)


def _vault_service() -> VaultService:
    return current_app.container.resolve(VaultService)


def _unexpected_error(operation: str, error: Exception):
    current_app.logger.exception(f"Unexpected error during {operation}: {error}")
    return create_error_response(ErrorCategory.SYSTEM_ERROR, str(error), status_code=500)


def _password_from_query():
    return password_parser.parse_args().get("pass")


@file_ns.route("")
class FileCollection(Resource):
    """Upload files and administer the whole vault"""

    @file_ns.doc("upload_file")
    @file_ns.expect(upload_parser)
    @file_ns.response(201, "Stored", file_record)
    @file_ns.response(400, "Bad Request", error_response)
    @file_ns.response(413, "File Too Large", error_response)
    @file_ns.response(503, "Storage Unavailable", error_response)
    def post(self):
        """
        Upload a file

        Accepts multipart form data with a `file` part and optional
        `password` and `message` fields. The file expires automatically.
        """
        try:
            upload = request.files.get("file")
            password = request.form.get("password") or None
            message = request.form.get("message") or None
        except RequestEntityTooLarge:
            return create_error_response(
                ErrorCategory.FILE_TOO_LARGE,
                f"Upload exceeds {current_app.config.get('MAX_CONTENT_LENGTH')} bytes",
                status_code=413,
            )

        if upload is None:
            return create_error_response(
                ErrorCategory.INVALID_REQUEST, "Missing multipart field 'file'", status_code=400
            )

        try:
            result = _vault_service().upload(
                upload.stream,
                password=password,
                message=message,
                filename=secure_filename(upload.filename or "") or None,
            )
            return result, 201

        except DomainError as e:
            return error_response_for(e)
        except Exception as e:
            return _unexpected_error("upload", e)

    @file_ns.doc("list_files", security="apikey")
    @file_ns.response(200, "Success", [file_record])
    @file_ns.response(403, "Forbidden", error_response)
    @require_api_key
    def get(self):
        """List every stored file (admin)"""
        try:
            return _vault_service().list_all(), 200
        except DomainError as e:
            return error_response_for(e)
        except Exception as e:
            return _unexpected_error("list", e)

    @file_ns.doc("delete_all_files", security="apikey")
    @file_ns.response(200, "Deleted", bulk_delete_response)
    @file_ns.response(403, "Forbidden", error_response)
    @require_api_key
    def delete(self):
        """
        Delete every metadata record (admin)

        Stored bytes are reclaimed later by the orphan sweep.
        """
        try:
            return {"deleted": _vault_service().delete_all_metadata()}, 200
        except DomainError as e:
            return error_response_for(e)
        except Exception as e:
            return _unexpected_error("delete all", e)


@file_ns.route("/<string:file_id>")
@file_ns.param("file_id", "File identifier")
class FileItem(Resource):
    """Metadata lookup and deletion of a single file"""

    @file_ns.doc("get_file")
    @file_ns.expect(password_parser)
    @file_ns.response(200, "Success", file_record)
    @file_ns.response(400, "Password Required", error_response)
    @file_ns.response(401, "Invalid Password", error_response)
    @file_ns.response(404, "Not Found", error_response)
    def get(self, file_id):
        """Get a file's metadata"""
        try:
            return _vault_service().get_metadata(file_id, _password_from_query()), 200
        except DomainError as e:
            return error_response_for(e)
        except Exception as e:
            return _unexpected_error("metadata lookup", e)

    @file_ns.doc("delete_file")
    @file_ns.expect(password_parser)
    @file_ns.response(200, "Deleted", deleted_record)
    @file_ns.response(400, "Password Required", error_response)
    @file_ns.response(401, "Invalid Password", error_response)
    @file_ns.response(404, "Not Found", error_response)
    def delete(self, file_id):
        """Delete a file and its stored bytes"""
        try:
            return _vault_service().delete(file_id, _password_from_query()), 200
        except DomainError as e:
            return error_response_for(e)
        except Exception as e:
            return _unexpected_error("delete", e)


@file_ns.route("/download/<string:file_id>")
@file_ns.param("file_id", "File identifier")
class FileDownload(Resource):
    """Stream a file's bytes"""

    @file_ns.doc("download_file")
    @file_ns.expect(password_parser)
    @file_ns.produces(["application/octet-stream"])
    @file_ns.response(200, "File content")
    @file_ns.response(400, "Password Required", error_response)
    @file_ns.response(401, "Invalid Password", error_response)
    @file_ns.response(404, "Not Found", error_response)
    def get(self, file_id):
        """
        Download a file

        Streams the stored bytes in chunks as an attachment.
        """
        try:
            download = _vault_service().download(file_id, _password_from_query())
        except DomainError as e:
            return error_response_for(e)
        except Exception as e:
            return _unexpected_error("download", e)

        response = Response(
            download, mimetype="application/octet-stream", direct_passthrough=True
        )
        response.call_on_close(download.close)
        if download.size is not None:
            response.headers["Content-Length"] = str(download.size)
        response.headers.set(
            "Content-Disposition", "attachment", filename=download.download_name
        )
        return response
