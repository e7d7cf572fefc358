"""Turns user input for one endpoint into an HTTP request and sends it."""

import base64
import json
import logging
import re
from datetime import datetime, timezone
from urllib.parse import quote, urlencode

import requests
from pydantic import BaseModel

from openapi_studio.errors import DispatchFailure, InvalidRequestBody
from openapi_studio.history import BODY_METHODS, HistoryEntry, RecordedResponse
from openapi_studio.parser.base import ApiEndpoint
from openapi_studio.security import declared_schemes

logger = logging.getLogger(__name__)

PLACEHOLDER = re.compile(r"\{([^{}]+)\}")


class Credential(BaseModel):
    """Values the user entered for one security scheme. Never persisted.

    ``token`` carries the bearer token, OAuth2 access token or OpenID
    Connect id token, depending on the scheme type.
    """

    api_key: str = ""
    username: str = ""
    password: str = ""
    token: str = ""


def _stringify(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def _is_empty(value) -> bool:
    return value is None or (isinstance(value, str) and value == "")


class RequestSynthesizer:
    """Builds and dispatches single test requests against a document's API."""

    def __init__(self, doc: dict, session: requests.Session | None = None, timeout: float | None = None):
        self.doc = doc
        self.session = session or requests.Session()
        self.timeout = timeout

    def split_params(self, endpoint: ApiEndpoint, param_values: dict) -> tuple[dict, dict]:
        """Split values into (path params, query params); empty values are dropped."""
        path_names = {p.name for p in endpoint.parameters if p.location == "path"}
        path_names.update(PLACEHOLDER.findall(endpoint.path))

        path_params, query = {}, {}
        for name, value in param_values.items():
            if _is_empty(value):
                continue
            if name in path_names:
                path_params[name] = value
            else:
                query[name] = value
        return path_params, query

    def build_url(self, base_host: str, path: str, path_params: dict, query: dict) -> str:
        def substitute(match):
            name = match.group(1)
            if name not in path_params:
                return match.group(0)
            return quote(_stringify(path_params[name]), safe="")

        url = base_host.rstrip("/") + PLACEHOLDER.sub(substitute, path)
        if query:
            pairs = [
                (name, _stringify(item))
                for name, value in query.items()
                for item in (value if isinstance(value, list) else [value])
            ]
            url = f"{url}?{urlencode(pairs)}"
        return url

    def apply_auth(self, scheme_name: str | None, credentials: dict, headers: dict, query: dict) -> None:
        """Inject the selected scheme's credential into ``headers`` or ``query``."""
        if not scheme_name:
            return

        binding = next((b for b in declared_schemes(self.doc) if b.name == scheme_name), None)
        if binding is None:
            logger.warning("Security scheme %s is not declared; sending without auth", scheme_name)
            return
        credential = credentials.get(scheme_name) or Credential()
        scheme = binding.scheme
        scheme_type = scheme.get("type")

        if scheme_type == "apiKey":
            name = scheme.get("name", "")
            location = scheme.get("in", "header")
            if not name or not credential.api_key:
                return
            if location == "query":
                query[name] = credential.api_key
            elif location == "cookie":
                headers["Cookie"] = f"{name}={credential.api_key}"
            else:
                headers[name] = credential.api_key

        elif scheme_type == "http":
            http_scheme = (scheme.get("scheme") or "").lower()
            if http_scheme == "basic":
                if credential.username or credential.password:
                    raw = f"{credential.username}:{credential.password}".encode()
                    headers["Authorization"] = f"Basic {base64.b64encode(raw).decode()}"
            elif http_scheme == "bearer":
                if credential.token:
                    headers["Authorization"] = f"Bearer {credential.token}"
            else:
                logger.warning("Unsupported http auth scheme %r for %s", http_scheme, scheme_name)

        elif scheme_type in ("oauth2", "openIdConnect"):
            if credential.token:
                headers["Authorization"] = f"Bearer {credential.token}"

        else:
            logger.warning("Unsupported security scheme type %r for %s", scheme_type, scheme_name)

    def parse_body(self, method: str, body_text: str | None):
        """Parsed JSON body, or None when the method or input carries none.

        Raises InvalidRequestBody if the text is not valid JSON.
        """
        if method not in BODY_METHODS or body_text is None or not body_text.strip():
            return None
        try:
            return json.loads(body_text)
        except json.JSONDecodeError as e:
            raise InvalidRequestBody() from e

    def build_and_send(
        self,
        endpoint: ApiEndpoint,
        param_values: dict,
        scheme_name: str | None = None,
        credentials: dict | None = None,
        base_host: str = "",
        body_text: str | None = None,
    ) -> HistoryEntry:
        """Build the request, send it and return its history entry.

        Never raises for invalid bodies or transport errors; both end up in
        ``HistoryEntry.response_error``.
        """
        started = datetime.now(timezone.utc)
        method = endpoint.method.upper()
        path_params, query = self.split_params(endpoint, param_values)
        request_query = dict(query)
        headers: dict[str, str] = {}
        self.apply_auth(scheme_name, credentials or {}, headers, query)
        url = self.build_url(base_host, endpoint.path, path_params, query)

        fields = dict(
            timestamp=started,
            method=method,
            path=endpoint.path,
            url=url,
            request_query=request_query,
            request_url_params=path_params,
            auth_scheme=scheme_name or None,
        )

        try:
            body = self.parse_body(method, body_text)
        except InvalidRequestBody as e:
            logger.warning("Not sending %s %s: %s", method, endpoint.path, e.detail)
            return HistoryEntry(headers=headers, request_body=body_text, response_error=e.detail, **fields)

        if body is not None:
            headers["Content-Type"] = "application/json"

        try:
            response = self._dispatch(method, url, headers, body)
        except DispatchFailure as e:
            logger.warning("Request %s %s failed: %s", method, url, e.detail)
            return HistoryEntry(headers=headers, request_body=body, response_error=e.detail, **fields)

        logger.info("%s %s -> %s", method, url, response.status)
        return HistoryEntry(headers=headers, request_body=body, response=response, **fields)

    def _dispatch(self, method: str, url: str, headers: dict, body) -> RecordedResponse:
        try:
            response = self.session.request(
                method,
                url,
                headers=headers,
                data=json.dumps(body) if body is not None else None,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise DispatchFailure(str(e) or e.__class__.__name__) from e
        return record_response(response)


def record_response(response: requests.Response) -> RecordedResponse:
    """JSON bodies are stored parsed; anything else as raw text."""
    content_type = response.headers.get("content-type", "")
    body = response.text
    if "json" in content_type.lower():
        try:
            body = response.json()
        except ValueError:
            logger.debug("Response declared %s but body is not JSON", content_type)
    return RecordedResponse(
        status=response.status_code,
        status_text=response.reason or "",
        headers=dict(response.headers),
        body=body,
    )
