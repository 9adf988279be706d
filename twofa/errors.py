class TwofaError(Exception):
    """Base for every failure reported by twofa."""


# storage

class NoFile(TwofaError):
    pass


class NoContent(TwofaError):
    pass


class AlreadyExists(TwofaError):
    pass


class WriteFailed(TwofaError):
    pass


class DeleteError(TwofaError):
    pass


class StorageDirectoryError(TwofaError):
    pass


# document

class ParseError(TwofaError):
    pass


class StorageInconsistent(TwofaError):
    pass


# settings

class SettingsError(TwofaError):
    pass


class MissingSecret(SettingsError):
    pass


class MismatchedType(SettingsError):
    pass


class UnknownValue(SettingsError):
    pass


class NoData(SettingsError):
    pass


class IncompleteSettings(SettingsError):
    pass


# transaction

class DecryptionFailed(TwofaError):
    pass


class EncryptionFailed(TwofaError):
    pass


class InvalidSecret(TwofaError):
    pass


class Stopped(Exception):
    """
    Expected early exit (exit code 0).

    Not a TwofaError: callers that handle failures must not treat it as one.
    """


class ApplicationNotFound(Stopped):
    pass


class Declined(Stopped):
    pass
