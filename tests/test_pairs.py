"""测试 PairStream 的遍历、目录创建以及浅层扫描。"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from srcdst.core.config import Policy
from srcdst.core.models import Dst, Src
from srcdst.core.resolver import resolve
from srcdst.core.scanner import scan_directory
from srcdst.core.timestamp import MonotonicTimestamp


def make_photos(root: Path, names=("c.jpg", "a.jpg", "b.jpg")) -> Path:
    photos = root / "photos"
    photos.mkdir()
    for name in names:
        (photos / name).write_bytes(name.encode())
    return photos


def test_auto_named_directory_scenario(tmp_path: Path, timestamp) -> None:
    root = tmp_path.resolve()
    photos = make_photos(root)

    pairs = resolve(Policy("png"), photos, timestamp=timestamp)
    out = root / "photos-T0001"
    assert pairs.is_batch()
    assert not out.exists()

    pairs.create_destination_directory()
    assert out.is_dir()

    assert next(pairs) == (Src.file(photos / "a.jpg"), Dst.file(out / "a.jpg"))
    assert next(pairs) == (Src.file(photos / "b.jpg"), Dst.file(out / "b.jpg"))
    assert not pairs.exhausted
    assert next(pairs) == (Src.file(photos / "c.jpg"), Dst.file(out / "c.jpg"))
    assert pairs.exhausted
    with pytest.raises(StopIteration):
        next(pairs)


def test_remaining_counts_down(tmp_path: Path, timestamp) -> None:
    photos = make_photos(tmp_path.resolve())
    pairs = resolve(Policy("png"), photos, timestamp=timestamp)

    assert pairs.remaining() == 3
    next(pairs)
    assert pairs.remaining() == 2
    list(pairs)
    assert pairs.remaining() == 0


def test_listing_skips_subdirectories(tmp_path: Path, timestamp) -> None:
    photos = make_photos(tmp_path.resolve(), names=("b.png", "a.png"))
    (photos / "nested").mkdir()
    (photos / "nested" / "deep.png").write_bytes(b"x")

    pairs = resolve(Policy("png"), photos, timestamp=timestamp)

    names = [dst.path.name for _, dst in pairs]
    assert names == ["a.png", "b.png"]


def test_scan_skips_symlinks(tmp_path: Path) -> None:
    photos = make_photos(tmp_path, names=("a.png",))
    try:
        (photos / "link.png").symlink_to(photos / "a.png")
    except (OSError, NotImplementedError):
        pytest.skip("当前平台无法创建符号链接")

    assert scan_directory(photos) == [photos / "a.png"]


def test_empty_directory_yields_nothing(tmp_path: Path, timestamp) -> None:
    photos = make_photos(tmp_path.resolve(), names=())

    pairs = resolve(Policy("png"), photos, timestamp=timestamp)

    assert pairs.is_batch()
    assert list(pairs) == []
    assert pairs.exhausted


def test_single_pair_stream_is_terminal(tmp_path: Path, timestamp) -> None:
    source = tmp_path / "a.txt"
    source.write_bytes(b"x")

    pairs = resolve(Policy("png"), source, "-", timestamp=timestamp)

    assert pairs.remaining() == 1
    assert len(list(pairs)) == 1
    assert list(pairs) == []
    assert pairs.exhausted


def test_create_directory_is_noop_without_auto_naming(tmp_path: Path, timestamp) -> None:
    root = tmp_path.resolve()
    photos = make_photos(root)
    out = root / "out"
    out.mkdir()
    source = photos / "a.jpg"

    streams = [
        resolve(Policy("png"), photos, out, timestamp=timestamp),
        resolve(Policy("png"), source, timestamp=timestamp),
        resolve(Policy("png"), source, "-", timestamp=timestamp),
    ]
    before = sorted(p.name for p in root.iterdir())

    for stream in streams:
        assert not stream.needs_directory_creation
        stream.create_destination_directory()

    assert sorted(p.name for p in root.iterdir()) == before


def test_create_directory_runs_once(tmp_path: Path, timestamp) -> None:
    photos = make_photos(tmp_path.resolve())
    pairs = resolve(Policy("png"), photos, timestamp=timestamp)

    pairs.create_destination_directory()
    pairs.create_destination_directory()

    assert pairs.destination.is_dir()
    assert not pairs.needs_directory_creation


def test_create_directory_fails_when_present(tmp_path: Path, timestamp) -> None:
    photos = make_photos(tmp_path.resolve())
    pairs = resolve(Policy("png"), photos, timestamp=timestamp)
    pairs.destination.mkdir()

    with pytest.raises(FileExistsError):
        pairs.create_destination_directory()


def test_monotonic_timestamp_never_repeats() -> None:
    frozen = datetime(2024, 1, 2, 3, 4, 5, 600)
    source = MonotonicTimestamp(clock=lambda: frozen)

    first, second, third = source(), source(), source()

    assert first == "20240102-030405-000600"
    assert second == "20240102-030405-000601"
    assert first < second < third
