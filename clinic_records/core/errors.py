class ClinicDataError(ValueError):
    """Base class for errors raised by the clinic data layer."""


class StorageError(ClinicDataError):
    """A key-value backend could not read, write or serialize a value.

    Backends raise this internally; the store adapter logs it and reports
    failure to the caller as None/False.
    """


class InvalidStatusTransition(ClinicDataError):
    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot change appointment status from '{current}' to '{requested}'.")


class ImportFormatError(ClinicDataError):
    """The import document is structurally unusable (bad JSON, wrong shape)."""
