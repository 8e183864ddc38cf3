"""Error taxonomy shared by the API, the resolvers and the report scripts.

Record-level errors (bad postal code, unknown region, failing third-party
service) are skipped by batch code. Database connection failures are fatal
to a report run; query failures only abort the current report section.
"""


class WineSurveyError(Exception):
    """Base class for every error raised by this package."""


class InvalidPostalCode(WineSurveyError, ValueError):
    def __init__(self, raw, reason="CEP inválido"):
        self.raw = raw
        self.reason = reason
        super().__init__(f"{reason}: {raw!r}")


class RegionNotFound(WineSurveyError, LookupError):
    def __init__(self, key, reason="Região não encontrada"):
        self.key = key
        self.reason = reason
        super().__init__(f"{reason}: {key}")


class ExternalServiceFailure(WineSurveyError):
    def __init__(self, service, message):
        self.service = service
        super().__init__(f"{service}: {message}")


class DatabaseConnectionFailure(WineSurveyError):
    pass


class DatabaseQueryFailure(WineSurveyError):
    pass
