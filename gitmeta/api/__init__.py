"""HTTP access to the intake and public API."""

from .apikey import ApiKeyValidator
from .http import (
    HttpClient,
    HttpError,
    HttpRequest,
    HttpResponse,
    MockHttpClient,
    RealHttpClient,
)
from .multipart import FormPart, MultipartForm
from .request import API_KEY_HEADER, RequestBuilder
from .site import api_base_url, intake_base_url

__all__ = [
    "API_KEY_HEADER",
    "ApiKeyValidator",
    "FormPart",
    "HttpClient",
    "HttpError",
    "HttpRequest",
    "HttpResponse",
    "MockHttpClient",
    "MultipartForm",
    "RealHttpClient",
    "RequestBuilder",
    "api_base_url",
    "intake_base_url",
]
