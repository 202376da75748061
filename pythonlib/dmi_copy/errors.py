class DmiCopyError(Exception):
    """Base class for every error dmi-copy reports on the command line."""


class ArgumentError(DmiCopyError):
    pass


class FileAccessError(DmiCopyError):
    def __init__(self, message, path):
        super().__init__(message)
        self.path = path


class DecodeError(DmiCopyError):
    pass


class EncodeError(DmiCopyError):
    pass
