"""Error kinds shared by the tutorial apps and their JSON handlers."""

from flask import jsonify


class StorageError(Exception):
    """A persistence call against the sleep database failed.

    Raised after the session has been rolled back. Storage failures are
    surfaced to the caller as-is; nothing retries them.
    """

    def __init__(self, operation: str, cause: Exception | None = None):
        self.operation = operation
        self.cause = cause
        message = f"storage operation '{operation}' failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


def register_error_handlers(flask_app) -> None:
    @flask_app.errorhandler(StorageError)
    def handle_storage_error(exc):
        flask_app.logger.error(f"[storage-error] op={exc.operation} cause={exc.cause!r}")
        return jsonify({'error': 'Storage unavailable', 'operation': exc.operation}), 503

    @flask_app.errorhandler(404)
    def handle_not_found(exc):
        return jsonify({'error': 'Not found'}), 404
