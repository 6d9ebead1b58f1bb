"""
Content store for the curated JSON documents (folktales, arts, calendar).

Documents live in a local directory by default, or in an S3-compatible
bucket when one is configured. An in-memory implementation backs the tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol
import json
import os

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

FOLKTALES_DOCUMENT = "FolkTales.json"
ARTS_DOCUMENT = "arts.json"
CALENDAR_DOCUMENT = "india_common.json"


class ContentUnavailableError(Exception):
    """Raised when a content document cannot be loaded."""


class ContentNotFoundError(ContentUnavailableError):
    """Raised when a content document does not exist."""


class InvalidContentError(ContentUnavailableError):
    """Raised when a content document is not valid JSON."""


class ContentStore(Protocol):
    """Defines the operations the API needs from the content source."""

    def load_json(self, name: str) -> Any:
        ...


def _decode(name: str, raw: bytes) -> Any:
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise InvalidContentError(f"{name}: {e}") from e


@dataclass
class InMemoryContentStore:
    """Test double holding raw document bytes keyed by name."""

    documents: dict = None

    def __post_init__(self):
        if self.documents is None:
            self.documents = {}

    def put_json(self, name: str, payload: Any) -> None:
        self.documents[name] = json.dumps(payload).encode("utf-8")

    def put_bytes(self, name: str, raw: bytes) -> None:
        self.documents[name] = raw

    def load_json(self, name: str) -> Any:
        raw = self.documents.get(name)
        if raw is None:
            raise ContentNotFoundError(name)
        return _decode(name, raw)


@dataclass
class FileContentStore:
    """Reads documents from a directory on local disk."""

    directory: str

    def load_json(self, name: str) -> Any:
        path = os.path.join(self.directory, os.path.basename(name))
        try:
            with open(path, "rb") as f:
                raw = f.read()
        except FileNotFoundError as e:
            raise ContentNotFoundError(path) from e
        except OSError as e:
            raise ContentUnavailableError(f"{path}: {e}") from e
        return _decode(name, raw)


@dataclass
class S3ContentStore:
    """
    Reads documents from an S3-compatible bucket under an optional prefix.
    """

    bucket: str
    prefix: str = ""
    region: str = ""
    endpoint: str = ""
    access_key_id: str = ""
    secret_access_key: str = ""

    def __post_init__(self):
        config = Config(
            s3={"addressing_style": "virtual"},
            signature_version="s3v4",
        )
        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint or None,
            region_name=self.region or None,
            aws_access_key_id=self.access_key_id or None,
            aws_secret_access_key=self.secret_access_key or None,
            config=config,
        )

    def _key(self, name: str) -> str:
        prefix = self.prefix.strip("/")
        return f"{prefix}/{name}" if prefix else name

    def load_json(self, name: str) -> Any:
        key = self._key(name)
        try:
            response = self._client.get_object(Bucket=self.bucket, Key=key)
            raw = response["Body"].read()
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            if code in ("NoSuchKey", "404"):
                raise ContentNotFoundError(key) from e
            raise ContentUnavailableError(f"{key}: {e}") from e
        except BotoCoreError as e:
            raise ContentUnavailableError(f"{key}: {e}") from e
        return _decode(name, raw)
