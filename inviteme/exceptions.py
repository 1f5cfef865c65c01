class BackendError(Exception):
    """Raised when a call to the managed backend (tables, storage, auth) fails."""


class FormValidationError(Exception):
    """
    A client-side form rule was violated.

    Args:
        message (str): The Hebrew message shown to the user.
        fields (list): Names of the offending form fields.
    """

    def __init__(self, message: str, fields=None):
        super().__init__(message)
        self.message = message
        self.fields = list(fields or [])
