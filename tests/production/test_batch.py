"""End-to-end tests for presigned URL resolution and concurrent downloads."""

from __future__ import annotations

import logging
from pathlib import Path

import httpx
import pytest

from Publit.Production.batch import FileBatch
from Publit.Production.config import BatchSettings
from Publit.Production.errors import (
    DestinationError,
    DownloadAbortedError,
    ResolutionError,
    ResponseError,
    TransferError,
)


def _contents(n: int) -> dict[int, bytes]:
    return {i: f"%PDF-{i}-".encode() * (i + 1) for i in range(1, n + 1)}


# ============================================================================
# download_files
# ============================================================================


def test_download_presigned_files_writes_every_file(fake_api, file_batch, tmp_path: Path) -> None:
    contents = _contents(4)
    files = [
        fake_api.add_file(fid, f"cover-{fid}.pdf", body, presigned=True)
        for fid, body in contents.items()
    ]

    errors = file_batch.download_files(files, tmp_path)

    assert errors == {fid: None for fid in contents}
    for fid, body in contents.items():
        assert (tmp_path / f"cover-{fid}.pdf").read_bytes() == body
    assert fake_api.show_requests == []
    assert len(fake_api.download_requests) == 4


def test_download_resolves_missing_presigned_urls_first(
    fake_api, file_batch, tmp_path: Path
) -> None:
    files = [
        fake_api.add_file(1, "a.pdf", b"aaa", presigned=True),
        fake_api.add_file(2, "b.pdf", b"bbb"),
        fake_api.add_file(3, "c.pdf", b"ccc"),
    ]

    errors = file_batch.download_files(files, tmp_path)

    assert errors == {1: None, 2: None, 3: None}
    assert sorted(int(r.url.path.rsplit("/", 1)[1]) for r in fake_api.show_requests) == [2, 3]
    assert all(r.url.params["aux"] == "presigned_url" for r in fake_api.show_requests)
    assert [f.original_name for f in files] == ["a.pdf", "b.pdf", "c.pdf"]
    assert all(f.has_presigned for f in files)
    assert (tmp_path / "c.pdf").read_bytes() == b"ccc"


def test_download_failure_is_reported_per_file(fake_api, file_batch, tmp_path: Path) -> None:
    files = [
        fake_api.add_file(1, "ok.pdf", b"fine", presigned=True),
        fake_api.add_file(2, "denied.pdf", b"nope", presigned=True),
    ]
    fake_api.download_failures[fake_api.path_of(2)] = 400

    errors = file_batch.download_files(files, tmp_path)

    assert errors[1] is None
    assert isinstance(errors[2], TransferError)
    assert errors[2].status_code == 400
    assert "400" in str(errors[2])
    assert (tmp_path / "ok.pdf").exists()
    assert not (tmp_path / "denied.pdf").exists()
    assert not list(tmp_path.glob(".tmp-*"))


def test_transport_error_is_captured(fake_api, file_batch, tmp_path: Path) -> None:
    files = [
        fake_api.add_file(1, "a.pdf", b"a", presigned=True),
        fake_api.add_file(2, "b.pdf", b"b", presigned=True),
    ]
    fake_api.broken_paths.add(fake_api.path_of(1))

    errors = file_batch.download_files(files, tmp_path)

    assert isinstance(errors[1], httpx.ConnectError)
    assert errors[2] is None


def test_stream_cut_off_leaves_no_partial_file(fake_api, file_batch, tmp_path: Path) -> None:
    files = [
        fake_api.add_file(1, "cut.pdf", b"%PDF-partial-body", presigned=True),
        fake_api.add_file(2, "whole.pdf", b"whole", presigned=True),
    ]
    fake_api.cut_off_paths.add(fake_api.path_of(1))

    errors = file_batch.download_files(files, tmp_path)

    assert isinstance(errors[1], httpx.ReadError)
    assert errors[2] is None
    assert not (tmp_path / "cut.pdf").exists()
    assert [p.name for p in tmp_path.iterdir()] == ["whole.pdf"]


def test_local_write_failure_is_reported_per_file(fake_api, file_batch, tmp_path: Path) -> None:
    (tmp_path / "taken.pdf").mkdir()
    files = [
        fake_api.add_file(1, "taken.pdf", b"blocked", presigned=True),
        fake_api.add_file(2, "free.pdf", b"free", presigned=True),
    ]

    errors = file_batch.download_files(files, tmp_path)

    assert isinstance(errors[1], OSError)
    assert errors[2] is None
    assert (tmp_path / "taken.pdf").is_dir()
    assert (tmp_path / "free.pdf").read_bytes() == b"free"
    assert not list(tmp_path.glob(".tmp-*"))


@pytest.mark.parametrize("kind", ["missing", "file"])
def test_invalid_destination_raises_before_any_request(
    kind: str, fake_api, file_batch, tmp_path: Path
) -> None:
    files = [fake_api.add_file(1, "a.pdf", b"a"), fake_api.add_file(2, "b.pdf", b"b")]
    if kind == "missing":
        dest = tmp_path / "does-not-exist"
    else:
        dest = tmp_path / "plain-file"
        dest.write_text("x")

    with pytest.raises(DestinationError):
        file_batch.download_files(files, dest)

    assert fake_api.requests == []


def test_resolution_failure_aborts_whole_batch(fake_api, file_batch, tmp_path: Path) -> None:
    files = [
        fake_api.add_file(1, "a.pdf", b"a", presigned=True),
        fake_api.add_file(2, "b.pdf", b"b"),
        fake_api.add_file(3, "c.pdf", b"c"),
    ]
    fake_api.show_failures[3] = 500

    errors = file_batch.download_files(files, tmp_path)

    assert set(errors) == {1, 2, 3}
    assert isinstance(errors[3], ResponseError)
    assert errors[3].status_code == 500
    assert isinstance(errors[1], DownloadAbortedError)
    assert isinstance(errors[2], DownloadAbortedError)
    assert errors[1] is not errors[2]
    assert fake_api.download_requests == []
    assert list(tmp_path.iterdir()) == []


def test_missing_presigned_url_in_response_is_resolution_error(
    fake_api, file_batch, tmp_path: Path
) -> None:
    files = [fake_api.add_file(1, "a.pdf", b"a")]
    fake_api.omit_presigned.add(1)

    errors = file_batch.download_files(files, tmp_path)

    assert isinstance(errors[1], ResolutionError)
    assert fake_api.download_requests == []


def test_empty_batch_makes_no_requests(fake_api, file_batch, tmp_path: Path) -> None:
    assert file_batch.download_files([], tmp_path) == {}
    assert file_batch.resolve_presigned([]) == {}
    assert fake_api.requests == []


@pytest.mark.parametrize("workers", [1, 5, 50])
def test_worker_count_does_not_change_results(
    workers: int, fake_api, api_client, download_client, tmp_path: Path
) -> None:
    contents = _contents(8)
    files = [fake_api.add_file(fid, f"f{fid}.pdf", body) for fid, body in contents.items()]
    fake_api.download_failures[fake_api.path_of(5)] = 403
    batch = FileBatch(
        api_client, settings=BatchSettings(workers=workers), download_client=download_client
    )

    errors = batch.download_files(files, tmp_path)

    assert set(errors) == set(contents)
    assert [fid for fid, err in errors.items() if err is not None] == [5]
    assert sorted(p.name for p in tmp_path.iterdir()) == sorted(
        f"f{fid}.pdf" for fid in contents if fid != 5
    )


def test_concurrent_downloads_are_bounded_by_workers(
    fake_api, api_client, download_client, tmp_path: Path
) -> None:
    files = [
        fake_api.add_file(fid, f"f{fid}.pdf", b"x", presigned=True) for fid in range(1, 9)
    ]
    fake_api.download_delay = 0.02
    batch = FileBatch(api_client, settings=BatchSettings(workers=2), download_client=download_client)

    errors = batch.download_files(files, tmp_path)

    assert all(err is None for err in errors.values())
    assert 1 <= fake_api.max_active_downloads <= 2


def test_duplicate_names_overwrite_each_other(fake_api, file_batch, tmp_path: Path) -> None:
    files = [
        fake_api.add_file(1, "same.pdf", b"first", presigned=True),
        fake_api.add_file(2, "same.pdf", b"second", presigned=True),
    ]

    errors = file_batch.download_files(files, tmp_path)

    assert errors == {1: None, 2: None}
    assert [p.name for p in tmp_path.iterdir()] == ["same.pdf"]
    assert (tmp_path / "same.pdf").read_bytes() in (b"first", b"second")


def test_unsafe_file_name_fails_only_that_file(fake_api, file_batch, tmp_path: Path) -> None:
    out = tmp_path / "out"
    out.mkdir()
    files = [
        fake_api.add_file(1, "good.pdf", b"good", presigned=True),
        fake_api.add_file(2, "..", b"evil", presigned=True),
    ]

    errors = file_batch.download_files(files, out)

    assert errors[1] is None
    assert isinstance(errors[2], TransferError)
    assert [p.name for p in out.iterdir()] == ["good.pdf"]


def test_download_logs_failures(fake_api, file_batch, tmp_path: Path, caplog) -> None:
    files = [fake_api.add_file(1, "a.pdf", b"a", presigned=True)]
    fake_api.download_failures[fake_api.path_of(1)] = 404

    with caplog.at_level(logging.WARNING, logger="Publit.Production.batch"):
        file_batch.download_files(files, tmp_path)

    assert any("file 1" in record.message for record in caplog.records)
    assert not any("X-Amz-Signature" in record.message for record in caplog.records)


# ============================================================================
# resolve_presigned
# ============================================================================


def test_resolve_presigned_replaces_files_with_refreshed_copies(fake_api, file_batch) -> None:
    done = fake_api.add_file(1, "a.pdf", b"a", presigned=True)
    pending = fake_api.add_file(2, "b.pdf", b"b")
    files = [done, pending]

    errors = file_batch.resolve_presigned(files)

    assert errors == {1: None, 2: None}
    assert files[0] is done
    assert files[1] is not pending
    assert pending.presigned_url == ""
    assert files[1].presigned_url.startswith("https://files.publit.test/2/b.pdf")
    assert files[1].original_name == "b.pdf"
    assert files[1].mime == "application/pdf"
    assert len(fake_api.show_requests) == 1


def test_resolve_presigned_skips_already_resolved_files(fake_api, file_batch) -> None:
    files = [fake_api.add_file(fid, f"{fid}.pdf", b"x", presigned=True) for fid in (1, 2, 3)]

    assert file_batch.resolve_presigned(files) == {1: None, 2: None, 3: None}
    assert fake_api.requests == []


def test_resolve_presigned_keeps_failed_files_untouched(fake_api, file_batch) -> None:
    files = [fake_api.add_file(1, "a.pdf", b"a"), fake_api.add_file(2, "b.pdf", b"b")]
    original = files[1]
    fake_api.show_failures[2] = 404

    errors = file_batch.resolve_presigned(files)

    assert errors[1] is None
    assert isinstance(errors[2], ResponseError)
    assert files[1] is original
    assert files[0].has_presigned


# ============================================================================
# Lifecycle
# ============================================================================


def test_default_download_client_is_built_lazily_and_closed(api_client) -> None:
    batch = FileBatch(api_client)

    client = batch.download_client

    assert isinstance(client, httpx.Client)
    assert batch.download_client is client
    batch.close()
    assert client.is_closed


def test_injected_download_client_is_not_closed(api_client, download_client) -> None:
    with FileBatch(api_client, download_client=download_client):
        pass

    assert not download_client.is_closed
