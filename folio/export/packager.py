"""
Archive packaging and the download lifecycle.

`package_archive` is the pure part: file map in, zip bytes out. ArchivePackager
wraps compile + package + deliver in a three-state lifecycle
(idle -> downloading -> idle | error) with at most one export in flight and
a cancellable cooldown that brings `error` back to `idle`.
"""

import asyncio
import io
import logging
import zipfile
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel

from folio.export.compiler import compile_bundle
from folio.export.guide import GuideNotice, github_username
from folio.models.errors import CompilationError, PackagingError
from folio.models.portfolio import PortfolioRecord
from folio.utils.paths import sanitize_filename

logger = logging.getLogger(__name__)

# zip cannot store dates before 1980; a fixed stamp keeps archives reproducible
ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)
DEFAULT_COOLDOWN_SECONDS = 5.0


def package_archive(file_map: Dict[str, bytes]) -> bytes:
    """Zips the compiled bundle; every mapping path becomes the member at that exact path."""
    buffer = io.BytesIO()
    try:
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for path in sorted(file_map):
                content = file_map[path]
                if isinstance(content, str):
                    content = content.encode("utf-8")
                info = zipfile.ZipInfo(path, date_time=ZIP_EPOCH)
                info.compress_type = zipfile.ZIP_DEFLATED
                info.external_attr = 0o644 << 16
                archive.writestr(info, content)
    except (OSError, ValueError, TypeError, zipfile.BadZipFile) as e:
        raise PackagingError(f"Could not build archive: {e}") from e
    return buffer.getvalue()


def archive_name(record: PortfolioRecord) -> str:
    return f"{sanitize_filename(record.personal_details.name)}_portfolio.zip"


# -----------------------------------------------------------------------------
# LIFECYCLE
# -----------------------------------------------------------------------------

class DownloadStatus(str, Enum):
    IDLE = "idle"
    DOWNLOADING = "downloading"
    ERROR = "error"


class PackagingOutcome(BaseModel):
    status: str  # delivered | rejected | failed
    archive_name: Optional[str] = None
    size: int = 0
    error: Optional[str] = None
    notice: Optional[GuideNotice] = None

    @property
    def ok(self) -> bool:
        return self.status == "delivered"


# schedule(delay_seconds, callback) -> handle with .cancel(); loop.call_later fits
Scheduler = Callable[[float, Callable[[], None]], Any]
Deliver = Callable[[str, bytes], None]


class ArchivePackager:
    def __init__(
        self,
        deliver: Deliver,
        cooldown: float = DEFAULT_COOLDOWN_SECONDS,
        scheduler: Optional[Scheduler] = None,
        compiler: Callable[[PortfolioRecord], Dict[str, bytes]] = compile_bundle,
    ):
        self.deliver = deliver
        self.cooldown = cooldown
        self.compiler = compiler
        self._scheduler = scheduler
        self._cooldown_handle = None
        self._listeners: List[Callable[[DownloadStatus], None]] = []
        self.status = DownloadStatus.IDLE
        self.last_error: Optional[str] = None

    def subscribe(self, listener: Callable[[DownloadStatus], None]) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener) if listener in self._listeners else None

    def _set_status(self, status: DownloadStatus) -> None:
        self.status = status
        for listener in list(self._listeners):
            try:
                listener(status)
            except Exception:
                logger.exception("Status listener %r failed on %s", listener, status.value)

    def _schedule(self, delay: float, callback: Callable[[], None]):
        if self._scheduler is not None:
            return self._scheduler(delay, callback)
        return asyncio.get_running_loop().call_later(delay, callback)

    def _cancel_cooldown(self) -> None:
        if self._cooldown_handle is not None:
            self._cooldown_handle.cancel()
            self._cooldown_handle = None

    def _end_cooldown(self) -> None:
        self._cooldown_handle = None
        if self.status == DownloadStatus.ERROR:
            self._set_status(DownloadStatus.IDLE)

    def _build(self, record: PortfolioRecord) -> bytes:
        name = archive_name(record)
        archive = package_archive(self.compiler(record))
        try:
            self.deliver(name, archive)
        except OSError as e:
            raise PackagingError(f"Could not save {name}: {e}") from e
        return archive

    async def request(self, record: Optional[PortfolioRecord]) -> PackagingOutcome:
        """
        Compiles, zips and delivers `record` off the event loop.
        A request while another is downloading is a no-op ("rejected").
        """
        if record is None:
            return PackagingOutcome(status="rejected", error="no record to export")
        if self.status == DownloadStatus.DOWNLOADING:
            logger.info("Export already in progress; ignoring request")
            return PackagingOutcome(status="rejected", error="export already in progress")

        self._cancel_cooldown()
        self.last_error = None
        self._set_status(DownloadStatus.DOWNLOADING)
        name = archive_name(record)
        try:
            archive = await asyncio.to_thread(self._build, record)
        except (CompilationError, PackagingError) as e:
            return self._fail(e)
        except Exception as e:
            logger.exception("Unexpected failure while packaging %s", name)
            return self._fail(PackagingError(str(e)))

        notice = GuideNotice(username=github_username(record), archive_name=name)
        logger.info("Delivered %s (%d bytes)", name, len(archive))
        self._set_status(DownloadStatus.IDLE)
        return PackagingOutcome(status="delivered", archive_name=name, size=len(archive), notice=notice)

    def _fail(self, error: Exception) -> PackagingOutcome:
        self.last_error = str(error)
        logger.error("Export failed: %s", error)
        self._set_status(DownloadStatus.ERROR)
        self._cooldown_handle = self._schedule(self.cooldown, self._end_cooldown)
        return PackagingOutcome(status="failed", error=self.last_error)
