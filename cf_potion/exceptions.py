from werkzeug.http import HTTP_STATUS_CODES


class PotionException(Exception):
    status_code = 500

    def as_dict(self):
        return {
            'status': self.status_code,
            'message': HTTP_STATUS_CODES.get(self.status_code, '')
        }


class MissingAttribute(PotionException):
    """
    Raised when a required attribute is absent from the manifest and has no default.
    """

    def __init__(self, resource, name):
        super(MissingAttribute, self).__init__('{} has no value for required attribute "{}"'.format(resource, name))
        self.resource = resource
        self.name = name


class ImmutableAttribute(PotionException):
    """
    Raised on a write to a read-only attribute.
    """

    def __init__(self, resource, name):
        super(ImmutableAttribute, self).__init__('"{}" is read-only on {}'.format(name, resource))
        self.resource = resource
        self.name = name


class TypeMismatch(PotionException):
    """
    Raised when a value does not validate against the JSON-schema of its field.
    """
    status_code = 400

    def __init__(self, errors, root=None):
        self.root = root
        self.errors = list(errors)
        super(TypeMismatch, self).__init__('; '.join(error.message for error in self.errors))

    def _complete_path(self, error):
        path = tuple(error.absolute_path)
        if self.root is not None:
            return (self.root,) + path
        return path

    def _format_errors(self):
        for error in self.errors:
            yield {
                'validationOf': {error.validator: error.validator_value},
                'path': self._complete_path(error),
                'message': error.message
            }

    def as_dict(self):
        dct = super(TypeMismatch, self).as_dict()
        dct['errors'] = list(self._format_errors())
        return dct


class StaleReference(PotionException):
    """
    Raised by operations that need a server identity on an instance that has none, i.e. a draft or a deleted
    instance.
    """

    def __init__(self, resource, operation):
        super(StaleReference, self).__init__('Cannot {} {}: it has no server identity'.format(operation, resource))
        self.resource = resource
        self.operation = operation


class APIError(PotionException):
    """
    An error reported by the target, with the target's own error ``code`` and ``description``.
    """

    def __init__(self, code=None, description=None):
        self.code = code
        self.description = description
        super(APIError, self).__init__(code, description)

    def as_dict(self):
        dct = super(APIError, self).as_dict()
        dct['code'] = self.code
        if self.description:
            dct['message'] = self.description
        return dct

    def __str__(self):
        if self.description:
            return '{}: {}'.format(self.code, self.description)
        return str(self.code)


class NotFound(APIError):
    status_code = 404

    def __init__(self, description=None):
        super(NotFound, self).__init__(404, description)


class Denied(APIError):
    status_code = 403


class UploadFailed(APIError):
    status_code = 402

    def __init__(self, description=None):
        super(UploadFailed, self).__init__(402, description)


class BadResponse(PotionException):
    """
    The target answered with a status or body that could not be interpreted.
    """

    def __init__(self, code, body):
        self.code = code
        self.body = body
        super(BadResponse, self).__init__(code, body)

    @property
    def status_code(self):
        return self.code

    def __str__(self):
        return '{} {}: {}'.format(self.code, HTTP_STATUS_CODES.get(self.code, 'Unknown'), self.body)


class TargetRefused(PotionException):
    """
    The target could not be reached at all.
    """
    status_code = 503

    def __init__(self, message):
        self.message = message
        super(TargetRefused, self).__init__(message)
