"""Error kinds raised by services and mapped to HTTP responses in one place."""
from flask import current_app, jsonify
from werkzeug.exceptions import HTTPException


class ServiceError(Exception):
    status_code = 500
    default_message = 'Internal server error'

    def __init__(self, message=None):
        self.message = str(message or self.default_message)
        super().__init__(self.message)

    def to_response(self):
        return jsonify({'error': self.message}), self.status_code


class InvalidInput(ServiceError):
    status_code = 400
    default_message = 'Invalid request'


class ValidationFailed(InvalidInput):
    """Field validation errors. Rendered as plain text for legacy clients."""

    def __init__(self, details):
        if isinstance(details, (list, tuple)):
            self.details = [str(item) for item in details if item]
        else:
            self.details = [str(details)]
        super().__init__('Validation failed: ' + '; '.join(self.details))

    def to_response(self):
        return self.message, self.status_code, {'Content-Type': 'text/plain; charset=utf-8'}


class Unauthorized(ServiceError):
    status_code = 401
    default_message = 'Unauthorized'


class Forbidden(ServiceError):
    status_code = 403
    default_message = 'Forbidden'


class NotFound(ServiceError):
    status_code = 404
    default_message = 'Not found'


class Conflict(ServiceError):
    status_code = 409
    default_message = 'Conflict'


class UpstreamFailure(ServiceError):
    default_message = 'Upstream service failure'


class PersistenceFailure(ServiceError):
    default_message = 'Database operation failed'


def register_error_handlers(app):
    @app.errorhandler(ServiceError)
    def _handle_service_error(error):
        if error.status_code >= 500:
            current_app.logger.error(f'{type(error).__name__}: {error.message}')
        return error.to_response()

    @app.errorhandler(HTTPException)
    def _handle_http_error(error):
        return jsonify({'error': error.description or error.name}), error.code
