"""Domain errors for the Plumber installer."""


class InstallerError(RuntimeError):
    """Raised when installation or update cannot continue safely."""
