"""
Base class for expected, user-facing business errors.

Services raise DomainError subclasses; views translate them into
HTTP responses carrying {'error': message, 'code': code}.
"""


class DomainError(Exception):
    """Expected business error with a stable machine-readable code."""

    code = 'DOMAIN_ERROR'
    default_message = 'Operation not allowed'
    status_code = 400

    def __init__(self, message=None, **context):
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)

    def as_dict(self):
        return {'error': self.message, 'code': self.code}
