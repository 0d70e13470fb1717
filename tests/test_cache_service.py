import pytest

from app.services.rates.base import FailureReason, FetchFailure, SourceKind

from .conftest import FALLBACK, LIVE, NETWORK_DOWN


def test_initial_state_is_fallback_and_never_fetched(make_cache):
    cache, provider = make_cache(dict(LIVE))
    assert cache.last_fetch is None
    status = cache.status()
    assert status.is_live is False
    assert status.last_update is None
    assert status.source == "Fallback rates"
    assert provider.calls == 0


def test_first_call_fetches_and_flips_to_live(make_cache, clock):
    cache, provider = make_cache(dict(LIVE))
    snap = cache.get_rates()
    assert snap.source is SourceKind.LIVE
    assert dict(snap.table) == LIVE
    assert snap.last_update == clock.now
    assert provider.calls == 1


def test_within_window_reuses_table_with_single_fetch(make_cache, clock):
    cache, provider = make_cache(dict(LIVE))
    first = cache.get_rates()
    clock.advance(599)
    second = cache.get_rates()
    assert second.table is first.table
    assert second.source is SourceKind.LIVE
    assert provider.calls == 1


def test_window_expiry_triggers_refetch(make_cache, clock):
    updated = dict(LIVE, INR=84.0)
    cache, provider = make_cache(dict(LIVE), updated)
    first = cache.get_rates()
    clock.advance(600)
    snap = cache.get_rates()
    assert provider.calls == 2
    assert snap.table["INR"] == 84.0
    assert snap.last_update == clock.now
    assert snap.last_update > first.last_update


def test_always_failing_provider_serves_fallback(make_cache, clock):
    cache, provider = make_cache(NETWORK_DOWN)
    for _ in range(3):
        snap = cache.get_rates()
        assert snap.source is SourceKind.FALLBACK
        assert dict(snap.table) == FALLBACK
        assert cache.last_fetch is None
        clock.advance(1)
    # Every request retries: no stale window after a failure
    assert provider.calls == 3


def test_fail_once_then_succeed(make_cache, clock):
    cache, provider = make_cache(dict(LIVE), NETWORK_DOWN, dict(LIVE, EUR=0.95))
    live = cache.get_rates()
    clock.advance(601)

    degraded = cache.get_rates()
    assert degraded.source is SourceKind.FALLBACK
    assert dict(degraded.table) == FALLBACK
    # Timestamp of the last success is kept, not advanced
    assert cache.last_fetch == live.last_update

    recovered = cache.get_rates()
    assert provider.calls == 3
    assert recovered.source is SourceKind.LIVE
    assert recovered.table["EUR"] == 0.95
    assert cache.last_fetch == clock.now


def test_failed_refresh_discards_previous_live_table(make_cache, clock):
    cache, _ = make_cache(dict(LIVE), FetchFailure(FailureReason.TIMEOUT, "5s"))
    cache.get_rates()
    clock.advance(700)
    snap = cache.get_rates()
    assert snap.table["INR"] == FALLBACK["INR"]
    assert cache.status().is_live is False


def test_base_currency_reasserted(make_cache):
    cache, _ = make_cache(dict(LIVE, USD=1.1))
    assert cache.get_rates().table["USD"] == 1.0
    assert cache.fallback_table["USD"] == 1.0


def test_status_goes_stale_after_window_without_fetching(make_cache, clock):
    cache, provider = make_cache(dict(LIVE))
    cache.get_rates()
    status = cache.status()
    assert status.is_live is True
    assert status.source == "Open Exchange Rates API"
    assert status.last_update == clock.now

    clock.advance(601)
    status = cache.status()
    assert status.is_live is False
    assert status.last_update is not None
    assert provider.calls == 1


def test_status_lists_supported_currencies(make_cache):
    cache, _ = make_cache()
    assert cache.status().supported_currencies == list(FALLBACK)


def test_tables_are_read_only(make_cache):
    cache, _ = make_cache(NETWORK_DOWN)
    table = cache.get_rates().table
    with pytest.raises(TypeError):
        table["USD"] = 2.0  # type: ignore[index]
    assert cache.fallback_table["USD"] == 1.0


def test_clock_stepping_backwards_expires_cache(make_cache, clock):
    cache, provider = make_cache(dict(LIVE), dict(LIVE, INR=85.0))
    cache.get_rates()
    clock.advance(-3600)
    assert cache.status().is_live is False
    snap = cache.get_rates()
    assert provider.calls == 2
    assert snap.table["INR"] == 85.0
    assert cache.last_fetch == clock.now
