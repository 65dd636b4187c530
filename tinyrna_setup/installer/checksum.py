"""
Verification of a downloaded Miniconda installer against the SHA-256 hashes
published on the Miniconda repository index page.
"""
import hashlib
import logging
import re
from pathlib import Path
from typing import Optional

import requests
from rich.console import Console

from tinyrna_setup.console import main_console, success
from tinyrna_setup.constants import (
    DOWNLOAD_CHUNK_SIZE,
    INDEX_FIELD_COUNT,
    INDEX_FIELD_SEPARATOR,
    INDEX_HASH_FIELD,
    INDEX_NAME_FIELD,
    INDEX_ROW_SEPARATOR,
    REQUEST_TIMEOUT,
)
from tinyrna_setup.errors import ChecksumError, ChecksumMismatch, IndexFetchError
from tinyrna_setup.meta import get_meta_http_headers
from tinyrna_setup.models import ChecksumIndexEntry, InstallerArtifact

LOG = logging.getLogger(__name__)

ROW_SEPARATOR = re.compile(INDEX_ROW_SEPARATOR)
# Only bare <td>/</td> split fields, so `<td class="s">` stays inside the size field
FIELD_SEPARATOR = re.compile(INDEX_FIELD_SEPARATOR)


def sha256_of(path: Path) -> str:
    sha256_hash = hashlib.sha256()
    with open(path, "rb") as f:
        for byte_block in iter(lambda: f.read(DOWNLOAD_CHUNK_SIZE), b""):
            sha256_hash.update(byte_block)
    return sha256_hash.hexdigest()


def parse_checksum_index(index_text: str, filename: str) -> Optional[ChecksumIndexEntry]:
    """
    Find the published hash of ``filename`` in the index table.

    A row qualifies when it splits into exactly the expected number of fields
    and its name field contains the filename. The first qualifying row wins.
    """
    for row in ROW_SEPARATOR.split(index_text):
        fields = FIELD_SEPARATOR.split(row)
        if len(fields) != INDEX_FIELD_COUNT:
            continue

        if filename in fields[INDEX_NAME_FIELD - 1]:
            return ChecksumIndexEntry(
                filename=filename, sha256=fields[INDEX_HASH_FIELD - 1].strip()
            )

    return None


class ChecksumVerifier:
    def __init__(
        self,
        index_url: str,
        session: Optional[requests.Session] = None,
        timeout: int = REQUEST_TIMEOUT,
        console: Console = main_console,
    ) -> None:
        self.index_url = index_url
        self.session = session or requests.Session()
        self.timeout = timeout
        self.console = console

    def fetch_index(self) -> str:
        """
        Raises:
            IndexFetchError: Network failure or non-200 response. Not retried.
        """
        try:
            r = self.session.get(
                self.index_url, timeout=self.timeout, headers=get_meta_http_headers()
            )
        except requests.exceptions.RequestException as e:
            raise IndexFetchError(self.index_url, reason=str(e)) from e

        if r.status_code != 200:
            raise IndexFetchError(self.index_url, reason=f"HTTP {r.status_code} {r.reason}")

        return r.text

    def verify(self, path: Path) -> InstallerArtifact:
        """
        Check the file against the published index.

        The hash parsed from the table must match exactly. If the table could
        not be read that way, the file is still accepted when its hash appears
        anywhere in the page, which keeps verification working if the page
        layout changes. Otherwise the file is deleted.

        Raises:
            ChecksumError: The file could not be hashed.
            IndexFetchError: The index could not be downloaded.
            ChecksumMismatch: No published hash matches the file.
        """
        path = Path(path)

        try:
            actual = sha256_of(path)
        except OSError as e:
            raise ChecksumError(
                f"Failed to get checksum for Miniconda installer\nDetails: {e}"
            ) from e

        index_text = self.fetch_index()
        entry = parse_checksum_index(index_text, path.name)
        expected = entry.sha256 if entry else None
        LOG.debug("%s: expected %s, actual %s", path.name, expected, actual)

        artifact = InstallerArtifact(path=path, computed_hash=actual, expected_hash=expected)

        if actual == expected:
            success("Miniconda installer checksum verified", console=self.console)
            return artifact

        if actual in index_text:
            LOG.info("Structured lookup missed %s, hash found in raw index", path.name)
            artifact.verified_by_fallback = True
            success("Miniconda installer checksum verified (fallback)", console=self.console)
            return artifact

        path.unlink(missing_ok=True)
        raise ChecksumMismatch(path.name, expected=expected, actual=actual)
