"""
Error taxonomy for the tracker backend.
Every error carries the HTTP status it is reported with; the app-level
handler in main.py turns them into {"error": "..."} responses.
"""


class TrackerError(Exception):
    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class ValidationError(TrackerError):
    """Missing or invalid client input"""
    status_code = 400


class NotFoundError(TrackerError):
    status_code = 404


class ConfigurationError(TrackerError):
    """Required environment configuration (e.g. the LLM API key) is absent"""
    status_code = 500


class UpstreamFetchError(TrackerError):
    """Target URL unreachable or returned a non-success status"""
    status_code = 500


class ModelRequestError(TrackerError):
    """The language-model call itself failed (network, auth, non-200)"""
    status_code = 500


class ModelOutputParseError(TrackerError):
    """Model reply is not valid JSON, or not the expected shape"""
    status_code = 500


class DocumentRenderError(TrackerError):
    status_code = 500
