"""Tests for the packet writer orchestration."""

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import random

import pytest

from seqstore.demo import SAMPLE_PAYLOADS, expected_contents, sample_packets, shuffled_packets
from seqstore.errors import DuplicateIdentifier, IOFailure
from seqstore.index import MergeKind
from seqstore.parser import build_packet
from seqstore.writer import PacketWriter, WriteStatus


@pytest.mark.parametrize("seed", [0, 1, 7, 42, 2024])
def test_shuffled_sample_packets_are_stored_sorted(tmp_path: Path, seed: int) -> None:
    writer = PacketWriter(tmp_path / "results.dat")

    results = writer.write_many(shuffled_packets(seed))

    assert all(result.success for result in results)
    assert writer.contents() == expected_contents()
    assert writer.contents() == (
        b"aaabbccc" + b"dddd" + b"eeeeee" + b"fffff" + b"g" * 10 + b"h" + b"i" * 15
        + b"jjjj" + b"kkkkkk" + b"lll" + b"mm" + b"nnnn" + b"oooooo" + b"ppp"
        + b"qqqqq" + b"r" + b"s" * 23 + b"ttt"
    )
    assert len(writer.intervals()) == 1
    interval = writer.intervals()[0]
    assert (interval.start_id, interval.end_id) == (0x0161, 0x0174)
    assert interval.end_offset == len(expected_contents())


def test_arrival_order_does_not_change_file(tmp_path: Path) -> None:
    rng = random.Random(99)
    identifiers = rng.sample(range(0x10000), 60)
    payloads = {identifier: bytes([65 + identifier % 26]) * rng.randint(1, 30) for identifier in identifiers}
    packets = [build_packet(identifier, payloads[identifier]) for identifier in identifiers]

    sorted_writer = PacketWriter(tmp_path / "sorted.dat", chunk_size=7)
    sorted_writer.write_many(sorted(packets, key=lambda raw: raw[2:4]))
    expected = b"".join(payloads[identifier] for identifier in sorted(identifiers))
    assert sorted_writer.contents() == expected

    for attempt in range(3):
        rng.shuffle(packets)
        writer = PacketWriter(tmp_path / f"shuffled-{attempt}.dat", chunk_size=7)
        writer.write_many(packets)
        assert writer.contents() == expected


def test_duplicate_leaves_file_and_index_untouched(tmp_path: Path) -> None:
    writer = PacketWriter(tmp_path / "results.dat")
    writer.write(build_packet(5, b"five"))
    writer.write(build_packet(9, b"nine"))
    before_bytes = writer.contents()
    before_intervals = writer.intervals()

    result = writer.write(build_packet(9, b"again"))

    assert result.status is WriteStatus.DUPLICATE
    assert not result.success
    assert isinstance(result.error, DuplicateIdentifier)
    assert result.identifier == 9
    assert writer.contents() == before_bytes
    assert writer.path.stat().st_size == len(before_bytes)
    assert writer.intervals() == before_intervals


def test_identifier_inside_merged_run_is_duplicate(tmp_path: Path) -> None:
    writer = PacketWriter(tmp_path / "results.dat")
    for identifier in (1, 2, 3):
        writer.write(build_packet(identifier, b"x" * identifier))

    result = writer.write(build_packet(2, b"zz"))

    assert result.status is WriteStatus.DUPLICATE
    assert writer.contents() == b"xxxxxx"


def test_gap_fill_reports_double_merge(tmp_path: Path) -> None:
    writer = PacketWriter(tmp_path / "results.dat")
    writer.write(build_packet(10, b"AA"))
    writer.write(build_packet(12, b"CC"))

    result = writer.write(build_packet(11, b"B"))

    assert result.merge is MergeKind.BOTH
    assert result.offset == 2
    assert writer.contents() == b"AABCC"
    assert [(ivl.start_id, ivl.end_id) for ivl in writer.intervals()] == [(10, 12)]


def test_smallest_identifier_lands_at_offset_zero(tmp_path: Path) -> None:
    writer = PacketWriter(tmp_path / "results.dat")
    writer.write(build_packet(50, b"fifty"))
    writer.write(build_packet(70, b"seventy"))
    before = [ivl.end_offset for ivl in writer.intervals()]

    result = writer.write(build_packet(3, b"three"))

    assert result.offset == 0
    assert writer.contents().startswith(b"three")
    assert [ivl.end_offset for ivl in writer.intervals()[1:]] == [offset + 5 for offset in before]


def test_undersized_packets_are_dropped(tmp_path: Path) -> None:
    writer = PacketWriter(tmp_path / "results.dat")

    header_only = build_packet(4, b"")
    result = writer.write(header_only)

    assert len(header_only) == 12
    assert result.status is WriteStatus.DROPPED
    assert not writer.path.exists()
    assert writer.write(b"").status is WriteStatus.DROPPED
    assert writer.write(build_packet(4, b"!")).success
    assert writer.contents() == b"!"


def test_file_size_matches_index(tmp_path: Path) -> None:
    rng = random.Random(5)
    writer = PacketWriter(tmp_path / "results.dat", chunk_size=3)
    for identifier in rng.sample(range(200), 80):
        writer.write(build_packet(identifier, b"p" * rng.randint(1, 12)))

    run_lengths = [interval.end_offset - start for interval, start in writer.index.spans()]
    assert sum(run_lengths) == writer.path.stat().st_size


def test_stale_backing_file_is_truncated(tmp_path: Path) -> None:
    path = tmp_path / "results.dat"
    path.write_bytes(b"left over from an earlier run")

    writer = PacketWriter(path)
    writer.write(build_packet(1, b"new"))

    assert path.read_bytes() == b"new"


def test_io_failure_propagates_without_index_change(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    writer = PacketWriter(tmp_path / "results.dat")
    writer.write(build_packet(1, b"one"))

    def failing_insert(offset: int, payload: bytes, current_length: int) -> None:
        raise IOFailure(writer.path, "splice", "disk full")

    monkeypatch.setattr(writer.store, "insert_payload", failing_insert)

    with pytest.raises(IOFailure):
        writer.write(build_packet(2, b"two"))
    assert len(writer.index) == 1
    assert writer.index.total_length == 3


def test_stats_count_outcomes(tmp_path: Path) -> None:
    writer = PacketWriter(tmp_path / "results.dat")
    packets = sample_packets()
    writer.write_many(packets[:5])
    writer.write(packets[0])
    writer.write(b"short")

    stats = writer.stats()

    assert stats["accepted"] == 5
    assert stats["duplicate"] == 1
    assert stats["dropped"] == 1
    assert stats["intervals"] == 1
    assert stats["total_bytes"] == len(b"".join(SAMPLE_PAYLOADS[:5]))
