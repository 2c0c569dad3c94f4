"""
Progress probes map transport responses into progress reports.
"""
import pytest

from connection_management.transport import ServerErrorCode, ServerStatus
from wait_operations.core.probes import (
    FlushStateProbe,
    LoadCollectionProbe,
    LoadPartitionsProbe,
)

pytestmark = pytest.mark.asyncio


async def test_load_collection_probe_reports_percentage(transport):
    transport.progress["docs"] = [35]
    probe = LoadCollectionProbe(transport, "docs")

    report = await probe.poll()

    assert probe.operation == "load_collection(docs)"
    assert report.per_target_percent == [35]
    assert not report.is_complete


async def test_load_partitions_probe_keeps_requested_order(transport):
    transport.progress.update({"p1": [100], "p2": [60]})
    probe = LoadPartitionsProbe(transport, "docs", ["p1", "p2"])

    report = await probe.poll()

    assert [t.name for t in report.targets] == ["p1", "p2"]
    assert report.per_target_percent == [100, 60]


async def test_unlisted_partition_is_reported_at_zero(transport):
    transport.progress.update({"p1": [100], "p2": [100]})
    transport.visible = {"p1"}
    probe = LoadPartitionsProbe(transport, "docs", ["p1", "p2"])

    report = await probe.poll()

    assert [t.name for t in report.targets] == ["p1", "p2"]
    assert report.per_target_percent == [100, 0]
    assert not report.is_complete


@pytest.mark.parametrize(
    "code",
    [ServerErrorCode.COLLECTION_NOT_EXISTS, ServerErrorCode.COLLECTION_NOT_FOUND, ServerErrorCode.PARTITION_NOT_FOUND],
)
async def test_not_found_yields_empty_report(transport, code):
    transport.progress_status = [ServerStatus(code=code, reason="not visible")]
    probe = LoadCollectionProbe(transport, "docs")

    report = await probe.poll()

    assert report.targets == []
    assert not report.has_failed
    assert not report.is_complete


async def test_other_server_error_is_hard_failure(transport):
    transport.progress_status = [ServerStatus(code=ServerErrorCode.OUT_OF_MEMORY, reason="query node oom")]
    probe = LoadPartitionsProbe(transport, "docs", ["p1"])

    report = await probe.poll()

    assert report.hard_failure == "OUT_OF_MEMORY: query node oom"


async def test_probe_propagates_communication_failure(transport, unavailable):
    transport.raise_on["show_collections"] = unavailable
    probe = LoadCollectionProbe(transport, "docs")

    with pytest.raises(type(unavailable)):
        await probe.poll()


async def test_polling_never_triggers_the_operation(transport):
    transport.progress["docs"] = [10, 50, 100]
    probe = LoadCollectionProbe(transport, "docs")

    for _ in range(3):
        await probe.poll()

    assert transport.count("show_collections") == 3
    assert transport.count("load_collection") == 0


async def test_flush_state_probe(transport):
    transport.flush_states = [False, True]
    probe = FlushStateProbe(transport, "docs", [1, 2], flush_ts=99)

    first = await probe.poll()
    second = await probe.poll()

    assert probe.operation == "flush(docs)"
    assert first.per_target_percent == [0]
    assert second.is_complete
    assert transport.flush_state_args == ([1, 2], "docs", 99)


async def test_flush_state_probe_server_error(transport):
    transport.flush_state_status = ServerStatus(code=ServerErrorCode.UNEXPECTED_ERROR, reason="no segments")
    probe = FlushStateProbe(transport, "docs", [1], flush_ts=1)

    report = await probe.poll()

    assert report.has_failed
    assert "no segments" in report.hard_failure
