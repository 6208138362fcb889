"""Errors raised while loading, rendering and deploying service units."""


class SystemYmlError(Exception):
    """Base class for all systemyml errors."""


class InvalidInputPath(SystemYmlError):
    """The descriptor path is neither a regular file nor a directory."""

    def __init__(self, path, reason: str = "not a file or directory"):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid configuration path: {path} ({reason})")


class ParseError(SystemYmlError):
    """A descriptor file could not be parsed into service descriptors."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to parse {path}: {reason}")


class InvalidFieldValue(SystemYmlError):
    """A descriptor field does not match the type its directive requires."""

    def __init__(self, descriptor: str, field: str, reason: str):
        self.descriptor = descriptor
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid value for '{field}' in descriptor '{descriptor}': {reason}")


class ActivationError(SystemYmlError):
    """Enabling or starting a written unit failed."""

    def __init__(self, unit: str, reason: str):
        self.unit = unit
        self.reason = reason
        super().__init__(f"Failed to enable and start {unit}: {reason}")


class UnitWriteError(SystemYmlError):
    """Creating the target directory or writing a unit file failed."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to write {path}: {reason}")
