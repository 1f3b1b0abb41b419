"""
Exceptions for LumenBox
Everything raised on purpose derives from LumenBoxError so callers can catch one base
"""


class LumenBoxError(Exception):
    # general container for errors
    pass


class InvalidInputError(LumenBoxError, ValueError):
    # raised on a malformed argument (salt length, empty name, bad config value)
    pass


class FormatError(LumenBoxError, ValueError):
    # raised when a container is truncated, foreign or carries an unknown header
    pass


class AuthenticationError(LumenBoxError):
    # raised when decryption cannot be verified (wrong password or corrupted data)
    pass
