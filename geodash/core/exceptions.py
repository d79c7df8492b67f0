"""GeoDash exceptions."""


class GeoDashError(Exception):
    """Base exception for GeoDash."""


class ConfigError(GeoDashError):
    """Invalid or missing configuration."""


class MeasurementError(GeoDashError):
    """Measurement tool misuse."""


class UnknownUnitError(MeasurementError, KeyError):
    """Unit symbol not present in the registry for the requested kind."""

    def __init__(self, kind, symbol):
        self.kind = kind
        self.symbol = symbol
        super().__init__(f"Unknown {kind} unit: {symbol!r}")

    def __str__(self) -> str:
        return self.args[0]


class SessionReentryError(MeasurementError, RuntimeError):
    """Raised when a session transition starts while another one is still running."""
