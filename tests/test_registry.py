import asyncio
from decimal import Decimal

import pytest

from conftest import RecordingNotifier
from pricewatch.alerts.registry import TargetAlertRegistry
from pricewatch.errors import FetchError, RequestError
from pricewatch.models import AlertDirection, FetchErrorKind, RequestErrorKind
from pricewatch.price_services.mock_service import MockPriceService

D = Decimal


def make_registry(prices, delay=0.0):
    source = MockPriceService(prices, delay=delay)
    notifier = RecordingNotifier()
    return TargetAlertRegistry(source, notifier), source, notifier


def test_submit_derives_direction():
    registry, _, _ = make_registry({"LKOH": [7050]})

    async def go():
        up = await registry.submit("lkoh", D("7100"), 1)
        down = await registry.submit("LKOH", D("7000"), 1)
        return up, down, await registry.snapshot()

    up, down, pending = asyncio.run(go())
    assert up.direction == AlertDirection.ABOVE
    assert up.symbol == "LKOH"
    assert down.direction == AlertDirection.BELOW
    assert pending == [up, down]


@pytest.mark.parametrize("ticker,target,kind", [
    ("NOPE", D("10"), RequestErrorKind.UNKNOWN_SYMBOL),
    ("LKOH", D("7050.00"), RequestErrorKind.INVALID_TARGET),
    ("LKOH", D("0"), RequestErrorKind.INVALID_PRICE),
    ("LKOH", D("-3"), RequestErrorKind.INVALID_PRICE),
])
def test_rejected_submit_creates_nothing(ticker, target, kind):
    registry, _, _ = make_registry({"LKOH": [7050]})

    async def go():
        with pytest.raises(RequestError) as exc:
            await registry.submit(ticker, target, 1)
        return exc.value, await registry.snapshot()

    error, pending = asyncio.run(go())
    assert error.kind == kind
    assert pending == []


def test_submit_fetch_failure_propagates():
    registry, _, _ = make_registry({"LKOH": [FetchError(FetchErrorKind.TIMEOUT, "slow")]})

    async def go():
        with pytest.raises(FetchError):
            await registry.submit("LKOH", D("7100"), 1)
        return await registry.snapshot()

    assert asyncio.run(go()) == []


def test_lkoh_target_example_end_to_end():
    registry, source, notifier = make_registry({"LKOH": [7050.0]})

    async def go():
        alert = await registry.submit("LKOH", D("7100.0"), 42)
        assert alert.direction == AlertDirection.ABOVE

        assert await registry.sweep() == []  # still 7050
        source.set_prices("LKOH", 7100.0)
        fired = await registry.sweep()
        assert fired == [alert]
        assert await registry.pending_for(42) == []

        assert await registry.sweep() == []
        return alert

    asyncio.run(go())
    assert len(notifier.sent) == 1
    destination, text = notifier.sent[0]
    assert destination == 42
    assert "7100.00" in text and "Лукойл" in text


def test_below_alert_fires_on_or_under_target():
    registry, source, notifier = make_registry({"SBER": [300]})

    async def go():
        await registry.submit("SBER", D("290"), 7)
        source.set_prices("SBER", 290.01)
        first = await registry.sweep()
        source.set_prices("SBER", 290)
        second = await registry.sweep()
        return first, second

    first, second = asyncio.run(go())
    assert first == []
    assert len(second) == 1
    assert len(notifier.sent) == 1


def test_sweep_isolation_between_symbols():
    registry, source, notifier = make_registry({"LKOH": [7050], "SBER": [300]})

    async def go():
        a = await registry.submit("SBER", D("310"), 1)
        b = await registry.submit("LKOH", D("7100"), 2)
        source.set_prices("SBER", FetchError(FetchErrorKind.TRANSPORT, "down"))
        source.set_prices("LKOH", 7150)
        fired = await registry.sweep()
        return a, b, fired, await registry.snapshot()

    a, b, fired, pending = asyncio.run(go())
    assert fired == [b]
    assert pending == [a]
    assert notifier.sent[0][0] == 2


def test_send_failure_keeps_alert_for_next_sweep():
    registry, source, notifier = make_registry({"LKOH": [7050]})
    notifier.fail_next = 1

    async def go():
        alert = await registry.submit("LKOH", D("7000"), 5)
        source.set_prices("LKOH", 6990)
        first = await registry.sweep()
        kept = await registry.snapshot()
        second = await registry.sweep()
        return alert, first, kept, second, await registry.snapshot()

    alert, first, kept, second, final = asyncio.run(go())
    assert first == []
    assert kept == [alert]
    assert second == [alert]
    assert final == []
    assert notifier.attempts == 2
    assert len(notifier.sent) == 1


def test_concurrent_submits_survive_concurrent_sweep():
    registry, source, notifier = make_registry({"LKOH": [7050], "SBER": [300]}, delay=0.001)
    count = 20

    async def go():
        triggered = await registry.submit("SBER", D("290"), 999)
        source.set_prices("SBER", 280)
        submits = [registry.submit("LKOH", D(8000 + i), 1000 + i) for i in range(count)]
        results = await asyncio.gather(registry.sweep(), *submits)
        return triggered, results, await registry.snapshot()

    triggered, results, pending = asyncio.run(go())
    created = results[1:]
    assert len(pending) == count
    assert {a.alert_id for a in pending} == {a.alert_id for a in created}
    assert triggered not in pending
    assert [d for d, _ in notifier.sent] == [999]


def test_run_keeps_sweeping(monkeypatch):
    registry, source, notifier = make_registry({"LKOH": [7050]})
    sweeps = []

    async def fake_sweep():
        sweeps.append(1)
        if len(sweeps) == 1:
            raise RuntimeError("unexpected")
        if len(sweeps) == 3:
            raise asyncio.CancelledError()
        return []

    monkeypatch.setattr(registry, "sweep", fake_sweep)

    with pytest.raises(asyncio.CancelledError):
        asyncio.run(registry.run(0))
    assert len(sweeps) == 3
