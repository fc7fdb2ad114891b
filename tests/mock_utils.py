"""
Mock utilities for adapter testing.

Builds the errors the Google API client raises, so adapter tests can
exercise retry and error conversion without a network.
"""

from googleapiclient.errors import HttpError
from httplib2 import Response


def make_http_error(status: int, message: str = "Error") -> HttpError:
    """
    Create an HttpError with the given status.

    Example:
        mock_api_chain(service, "documents.get.execute",
                       side_effect=make_http_error(404, "Not found"))
    """
    resp = Response({"status": status})
    return HttpError(resp, message.encode())
