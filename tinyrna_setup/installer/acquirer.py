import logging
from pathlib import Path
from typing import Optional

import requests
from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TimeRemainingColumn,
    TransferSpeedColumn,
)

from tinyrna_setup.config import SetupContext
from tinyrna_setup.console import main_console, status, success
from tinyrna_setup.constants import DOWNLOAD_CHUNK_SIZE
from tinyrna_setup.errors import DownloadError, InstallFailedError
from tinyrna_setup.meta import get_meta_http_headers
from tinyrna_setup.models import InstallerArtifact
from tinyrna_setup.runner import ProcessSupervisor

from .checksum import ChecksumVerifier

LOG = logging.getLogger(__name__)


class InstallerAcquirer:
    """
    Downloads, verifies and runs the Miniconda installer.

    The installer file only lives for the duration of acquire(): it is
    removed once the installer has run, and on every failure path.
    """

    def __init__(
        self,
        context: SetupContext,
        supervisor: ProcessSupervisor,
        session: Optional[requests.Session] = None,
        verifier: Optional[ChecksumVerifier] = None,
        console: Console = main_console,
    ) -> None:
        self.context = context
        self.supervisor = supervisor
        self.console = console

        if session is None:
            session = requests.Session()
            session.headers.update(get_meta_http_headers())
        self.session = session

        self.verifier = verifier or ChecksumVerifier(
            context.repo_url,
            session=session,
            timeout=context.request_timeout,
            console=console,
        )

    def installer_url(self, installer_name: str) -> str:
        return self.context.repo_url.rstrip("/") + "/" + installer_name

    def download(self, url: str, destination: Path) -> Path:
        """
        Stream ``url`` to ``destination`` with a progress bar.

        Raises:
            DownloadError: On network errors, non-200 responses, or if no file
                was written.
        """
        try:
            with self.session.get(url, stream=True, timeout=self.context.request_timeout) as r:
                if r.status_code != 200:
                    raise DownloadError(destination.name, reason=f"HTTP {r.status_code} {r.reason}")

                total = int(r.headers.get("Content-Length", 0)) or None
                progress = Progress(
                    BarColumn(),
                    DownloadColumn(),
                    TransferSpeedColumn(),
                    TimeRemainingColumn(),
                    console=self.console,
                    transient=True,
                )
                with progress, open(destination, "wb") as f:
                    task = progress.add_task("download", total=total)
                    for chunk in r.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                        f.write(chunk)
                        progress.update(task, advance=len(chunk))
        except requests.exceptions.RequestException as e:
            destination.unlink(missing_ok=True)
            raise DownloadError(destination.name, reason=str(e)) from e

        if not destination.is_file():
            raise DownloadError(destination.name)

        return destination

    def acquire(self, installer_name: Optional[str] = None) -> InstallerArtifact:
        """
        Download the installer into the work directory, verify it and run it
        interactively.

        Raises:
            DownloadError: The installer could not be downloaded.
            ChecksumError: The installer failed verification.
            InstallFailedError: The installer exited non-zero.
        """
        installer_name = installer_name or self.context.host.installer_name
        destination = self.context.work_dir / installer_name

        try:
            status("Downloading Miniconda...", console=self.console)
            self.download(self.installer_url(installer_name), destination)
            success("Miniconda downloaded", console=self.console)

            artifact = self.verifier.verify(destination)

            status("Running interactive Miniconda installer...", console=self.console)
            # bash, since the installer no longer works with zsh
            result = self.supervisor.run(["bash", str(destination)])
            if not result.succeeded:
                raise InstallFailedError(result.returncode)

            success("Miniconda installed", console=self.console)
            return artifact
        finally:
            if destination.exists():
                LOG.info("Removing installer %s", destination)
                destination.unlink()
