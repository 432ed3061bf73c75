import asyncio

import pytest

from nameserver_sort.config import Settings
from nameserver_sort.errors import EmptyResult, SourceUnavailable
from nameserver_sort.runner import SortRunner

from tests.fakes import ScriptedTransport


def source_of(addresses):
    requested = []

    async def source(country_code, max_count):
        requested.append((country_code, max_count))
        return list(addresses)

    source.requested = requested
    return source


async def unavailable_source(country_code, max_count):
    raise SourceUnavailable("https://public-dns.info/nameserver/us.txt", "empty response")


def test_run_ranks_reachable_candidates():
    transport = ScriptedTransport({"A": 10.0, "C": 5.0})
    source = source_of(["A", "B", "C"])
    runner = SortRunner(Settings(country_code="SE", max_servers=50), transport=transport, source=source)

    result = asyncio.run(runner.run())

    assert [o.address for o in result] == ["C", "A"]
    assert result.candidates_probed == 3
    assert source.requested == [("se", 50)]


def test_source_failure_aborts_before_probing():
    transport = ScriptedTransport({"A": 1.0})
    runner = SortRunner(Settings(), transport=transport, source=unavailable_source)

    with pytest.raises(SourceUnavailable):
        asyncio.run(runner.run())

    assert transport.calls == []


def test_empty_result_is_returned_by_default():
    runner = SortRunner(Settings(), transport=ScriptedTransport(), source=source_of(["A", "B"]))

    result = asyncio.run(runner.run())

    assert result.is_empty
    assert result.candidates_probed == 2


def test_empty_result_raises_when_required():
    runner = SortRunner(Settings(), transport=ScriptedTransport(), source=source_of(["A", "B"]))

    with pytest.raises(EmptyResult):
        asyncio.run(runner.run(require_results=True))


def test_runner_passes_settings_to_profiles():
    transport = ScriptedTransport({"1.1.1.1": 1.0})
    settings = Settings(timeout_seconds=3, min_replies=4)
    runner = SortRunner(settings, transport=transport, source=source_of(["1.1.1.1"]))

    asyncio.run(runner.run())
    _, profile = transport.calls[0]

    assert profile.timeout_seconds == 3
    assert profile.min_reply_count == 4


def test_invalid_settings_are_rejected():
    with pytest.raises(ValueError):
        SortRunner(Settings(max_servers=1), transport=ScriptedTransport())


def test_close_closes_transport():
    transport = ScriptedTransport()
    runner = SortRunner(Settings(), transport=transport, source=source_of([]))

    asyncio.run(runner.close())

    assert transport.closed
