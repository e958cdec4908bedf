"""
Versioned JSON documents backing the notification job.

Every document is read together with an opaque version token and written back
with the token from that read, so a concurrent writer is detected instead of
silently overwritten. Two backends are provided:

- GitHubDocumentStore: files in a private GitHub repository (contents API, git sha as version)
- SupabaseDocumentStore: rows in a `documents` table (integer version column)
"""

import base64
import json
from typing import Any

import requests

from models.types import DocumentName, DocumentVersion
from shared.errors import DocumentConflictError, DocumentStoreError

GITHUB_API_URL = "https://api.github.com"
HTTP_TIMEOUT_SECONDS = 15
DOCUMENTS_TABLE = "documents"


class DocumentStore:
    """Interface shared by record store backends."""

    def read(self, name: DocumentName) -> tuple[Any, DocumentVersion | None]:
        """
        Read a JSON document.

        Returns:
            (value, version). (None, None) if the document does not exist.
            (None, version) if it exists but is empty or not valid JSON.

        Raises:
            DocumentStoreError: If the store cannot be reached or answers with an error
        """
        raise NotImplementedError

    def write(
        self, name: DocumentName, value: Any, expected_version: DocumentVersion | None
    ) -> DocumentVersion:
        """
        Write a JSON document if it still has expected_version.

        Args:
            name: Document name
            value: JSON-serializable value
            expected_version: Version from the previous read, None to create

        Returns:
            The new version token

        Raises:
            DocumentConflictError: If the document changed since it was read
            DocumentStoreError: On any other failure
        """
        raise NotImplementedError


def _decode_json(name: DocumentName, text: str | None) -> Any:
    if not text or text.strip() == "":
        print(f"  ⚠ Document {name} is empty")
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        print(f"  ⚠ Document {name} contains invalid JSON: {e}")
        return None


def _response_object(response: requests.Response, what: str) -> dict[str, Any]:
    """JSON object body of a successful GitHub response."""
    try:
        payload = response.json()
    except ValueError as e:
        raise DocumentStoreError(f"{what}: response body is not JSON: {e}") from e
    if not isinstance(payload, dict):
        raise DocumentStoreError(f"{what}: expected a JSON object, got {type(payload).__name__}")
    return payload


class GitHubDocumentStore(DocumentStore):
    """Documents stored as files in a GitHub repository."""

    def __init__(
        self,
        token: str,
        repo: str,
        session: requests.Session | None = None,
        timeout: float = HTTP_TIMEOUT_SECONDS,
    ):
        self.token = token
        self.repo = repo
        self.session = session or requests.Session()
        self.timeout = timeout
        self._full_repo: str | None = repo if "/" in repo else None

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"token {self.token}",
            "Accept": "application/vnd.github.v3+json",
        }

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        try:
            return self.session.request(
                method, url, headers=self.headers, timeout=self.timeout, **kwargs
            )
        except requests.RequestException as e:
            raise DocumentStoreError(f"GitHub request failed: {method} {url}: {e}") from e

    def full_repo(self) -> str:
        """owner/repo, resolving the owner from the token when only a repo name is configured."""
        if self._full_repo:
            return self._full_repo

        response = self._request("GET", f"{GITHUB_API_URL}/user")
        if not response.ok:
            raise DocumentStoreError(
                f"Failed to fetch GitHub user: {response.status_code} {response.reason}"
            )
        login = _response_object(response, "GitHub user").get("login")
        if not login:
            raise DocumentStoreError("GitHub user response has no login")

        self._full_repo = f"{login}/{self.repo}"
        return self._full_repo

    def _contents_url(self, name: DocumentName) -> str:
        return f"{GITHUB_API_URL}/repos/{self.full_repo()}/contents/{name}"

    def read(self, name: DocumentName) -> tuple[Any, DocumentVersion | None]:
        response = self._request("GET", self._contents_url(name))

        if response.status_code == 404:
            return None, None
        if not response.ok:
            raise DocumentStoreError(
                f"Failed to load {name}: {response.status_code} {response.reason}"
            )

        payload = _response_object(response, f"Load {name}")
        sha = payload.get("sha")
        try:
            text = base64.b64decode(payload.get("content") or "").decode("utf-8")
        except (ValueError, UnicodeDecodeError) as e:
            print(f"  ⚠ Document {name} could not be decoded: {e}")
            return None, sha

        return _decode_json(name, text), sha

    def write(
        self, name: DocumentName, value: Any, expected_version: DocumentVersion | None
    ) -> DocumentVersion:
        content = base64.b64encode(
            json.dumps(value, indent=2, ensure_ascii=False).encode("utf-8")
        ).decode("ascii")
        body: dict[str, Any] = {"message": f"Update {name}", "content": content}
        if expected_version:
            body["sha"] = expected_version

        response = self._request("PUT", self._contents_url(name), json=body)

        if response.status_code in (409, 422):
            raise DocumentConflictError(
                f"{name} changed since it was read ({response.status_code})"
            )
        if not response.ok:
            raise DocumentStoreError(
                f"Failed to save {name}: {response.status_code} {response.text}"
            )

        content = _response_object(response, f"Save {name}").get("content")
        return content.get("sha", "") if isinstance(content, dict) else ""


class SupabaseDocumentStore(DocumentStore):
    """Documents stored as rows of the `documents` table: name, content (jsonb), version (int)."""

    def __init__(self, client: Any, table: str = DOCUMENTS_TABLE):
        self.client = client
        self.table = table

    def read(self, name: DocumentName) -> tuple[Any, DocumentVersion | None]:
        try:
            response = (
                self.client.table(self.table)
                .select("content, version")
                .eq("name", name)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise DocumentStoreError(f"Failed to load {name}: {e}") from e

        if not response.data:
            return None, None

        row = response.data[0]
        version = str(row.get("version")) if row.get("version") is not None else None
        content = row.get("content")
        if isinstance(content, str):
            content = _decode_json(name, content)
        return content, version

    def write(
        self, name: DocumentName, value: Any, expected_version: DocumentVersion | None
    ) -> DocumentVersion:
        if expected_version is None:
            try:
                self.client.table(self.table).insert(
                    {"name": name, "content": value, "version": 1}
                ).execute()
            except Exception as e:
                error_str = str(e).lower()
                if "duplicate" in error_str or "unique" in error_str:
                    raise DocumentConflictError(f"{name} was created concurrently") from e
                raise DocumentStoreError(f"Failed to create {name}: {e}") from e
            return "1"

        new_version = int(expected_version) + 1
        try:
            response = (
                self.client.table(self.table)
                .update({"content": value, "version": new_version})
                .eq("name", name)
                .eq("version", int(expected_version))
                .execute()
            )
        except Exception as e:
            raise DocumentStoreError(f"Failed to save {name}: {e}") from e

        if not response.data:
            raise DocumentConflictError(f"{name} changed since version {expected_version}")
        return str(new_version)
