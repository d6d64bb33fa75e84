import asyncio
import io
import zipfile

import pytest

from folio.export.compiler import compile_bundle
from folio.export.packager import ArchivePackager, DownloadStatus, archive_name, package_archive
from folio.models.errors import CompilationError, FieldError, PackagingError


class FakeHandle:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """Collects cooldown timers so tests decide when time passes."""

    def __init__(self):
        self.handles = []

    def __call__(self, delay, callback):
        handle = FakeHandle(delay, callback)
        self.handles.append(handle)
        return handle

    def advance(self):
        for handle in self.handles:
            if not handle.cancelled:
                handle.callback()


class Sink:
    def __init__(self, error=None):
        self.error = error
        self.delivered = []

    def __call__(self, name, archive):
        if self.error:
            raise self.error
        self.delivered.append((name, archive))


def watch(packager):
    history = [packager.status]
    packager.subscribe(history.append)
    return history


# -----------------------------------------------------------------------------
# package_archive
# -----------------------------------------------------------------------------

def test_archive_layout_mirrors_file_map(record):
    files = compile_bundle(record)
    archive = zipfile.ZipFile(io.BytesIO(package_archive(files)))

    assert archive.namelist() == sorted(files)
    for path, content in files.items():
        assert archive.read(path) == content


def test_archive_bytes_are_reproducible(record):
    files = compile_bundle(record)
    assert package_archive(files) == package_archive(compile_bundle(record))


def test_archive_rejects_unusable_content():
    with pytest.raises(PackagingError):
        package_archive({"index.html": 12345})


def test_archive_name(record):
    assert archive_name(record) == "Ada_Lovelace_portfolio.zip"


# -----------------------------------------------------------------------------
# lifecycle
# -----------------------------------------------------------------------------

def test_successful_export_returns_to_idle_with_guide(record):
    sink = Sink()
    packager = ArchivePackager(deliver=sink, scheduler=FakeScheduler())
    history = watch(packager)

    outcome = asyncio.run(packager.request(record))

    assert outcome.ok
    assert outcome.notice.username == "ada"
    assert outcome.notice.archive_name == "Ada_Lovelace_portfolio.zip"
    assert history == [DownloadStatus.IDLE, DownloadStatus.DOWNLOADING, DownloadStatus.IDLE]
    assert len(sink.delivered) == 1
    name, archive = sink.delivered[0]
    assert name == "Ada_Lovelace_portfolio.zip"
    assert outcome.size == len(archive)


def test_second_request_while_downloading_is_rejected(record):
    sink = Sink()
    packager = ArchivePackager(deliver=sink, scheduler=FakeScheduler())

    async def double_click():
        return await asyncio.gather(packager.request(record), packager.request(record))

    first, second = asyncio.run(double_click())

    assert first.status == "delivered"
    assert second.status == "rejected"
    assert len(sink.delivered) == 1


def test_failure_enters_error_then_cools_down_to_idle(record):
    compiles = []

    def counting_compiler(rec):
        compiles.append(rec)
        return compile_bundle(rec)

    scheduler = FakeScheduler()
    sink = Sink(error=OSError("disk full"))
    packager = ArchivePackager(deliver=sink, cooldown=5.0, scheduler=scheduler, compiler=counting_compiler)
    history = watch(packager)

    outcome = asyncio.run(packager.request(record))

    assert outcome.status == "failed"
    assert "disk full" in outcome.error
    assert packager.status == DownloadStatus.ERROR
    assert sink.delivered == []
    assert [h.delay for h in scheduler.handles] == [5.0]

    scheduler.advance()

    assert history == [DownloadStatus.IDLE, DownloadStatus.DOWNLOADING, DownloadStatus.ERROR, DownloadStatus.IDLE]
    assert len(compiles) == 1


def test_retry_during_cooldown_cancels_the_timer(record):
    scheduler = FakeScheduler()
    sink = Sink(error=OSError("disk full"))
    packager = ArchivePackager(deliver=sink, scheduler=scheduler)

    asyncio.run(packager.request(record))
    sink.error = None
    outcome = asyncio.run(packager.request(record))

    assert outcome.ok
    assert scheduler.handles[0].cancelled
    assert packager.status == DownloadStatus.IDLE


def test_compilation_error_is_reported_as_failure(record):
    def broken_compiler(rec):
        raise CompilationError([FieldError(path="seo.title", reason="empty")])

    packager = ArchivePackager(deliver=Sink(), scheduler=FakeScheduler(), compiler=broken_compiler)
    outcome = asyncio.run(packager.request(record))

    assert outcome.status == "failed"
    assert "seo.title" in outcome.error
    assert packager.status == DownloadStatus.ERROR


def test_failing_status_listener_does_not_wedge_the_lifecycle(record):
    sink = Sink()
    packager = ArchivePackager(deliver=sink, scheduler=FakeScheduler())
    seen = []

    def flaky(status):
        seen.append(status)
        if status == DownloadStatus.DOWNLOADING and seen.count(status) == 1:
            raise RuntimeError("listener blew up")

    packager.subscribe(flaky)

    first = asyncio.run(packager.request(record))
    assert first.ok
    assert packager.status == DownloadStatus.IDLE

    second = asyncio.run(packager.request(record))
    assert second.ok
    assert len(sink.delivered) == 2


def test_request_without_record_is_rejected():
    packager = ArchivePackager(deliver=Sink(), scheduler=FakeScheduler())
    outcome = asyncio.run(packager.request(None))
    assert outcome.status == "rejected"
    assert packager.status == DownloadStatus.IDLE


def test_default_scheduler_uses_the_event_loop(record):
    packager = ArchivePackager(deliver=Sink(error=OSError("nope")), cooldown=0.01)

    async def fail_and_wait():
        await packager.request(record)
        assert packager.status == DownloadStatus.ERROR
        await asyncio.sleep(0.05)
        return packager.status

    assert asyncio.run(fail_and_wait()) == DownloadStatus.IDLE
