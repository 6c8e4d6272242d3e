#!/usr/bin/env python3
"""Tests for the query cache: staleness, single-flight and invalidation."""

import asyncio
from datetime import datetime, timedelta

import pytest

from schoolhub.query import QueryClient, QueryState, key_matches
from schoolhub.query_keys import QueryKeys, attendance_keys, parent_attendance_keys, serialize_filters


class CountingFetcher:
	def __init__(self, value="data", delay=0.0, error=None):
		self.calls = 0
		self.value = value
		self.delay = delay
		self.error = error

	async def __call__(self):
		self.calls += 1
		if self.delay:
			await asyncio.sleep(self.delay)
		if self.error is not None:
			raise self.error
		return f"{self.value}-{self.calls}"


def test_fresh_result_is_served_from_cache():
	async def scenario():
		client = QueryClient()
		fetcher = CountingFetcher()
		first = await client.fetch_query(("students", "list", ()), fetcher, timedelta(minutes=5))
		second = await client.fetch_query(("students", "list", ()), fetcher, timedelta(minutes=5))
		return client, fetcher, first, second

	client, fetcher, first, second = asyncio.run(scenario())
	assert first == second == "data-1"
	assert fetcher.calls == 1
	state = client.get_query_state(("students", "list", ()))
	assert state.status == "success"
	assert state.invalidated is False


def test_zero_stale_time_always_refetches():
	async def scenario():
		client = QueryClient()
		fetcher = CountingFetcher()
		await client.fetch_query(("k",), fetcher, timedelta(0))
		return await client.fetch_query(("k",), fetcher, timedelta(0)), fetcher.calls

	assert asyncio.run(scenario()) == ("data-2", 2)


def test_stale_check():
	state = QueryState(status="success", updated_at=datetime(2024, 1, 1, 12, 0))
	assert state.is_stale(timedelta(minutes=5), now=datetime(2024, 1, 1, 12, 4)) is False
	assert state.is_stale(timedelta(minutes=5), now=datetime(2024, 1, 1, 12, 5)) is True
	assert QueryState().is_stale(timedelta(hours=1)) is True


def test_concurrent_fetches_share_one_request():
	async def scenario():
		client = QueryClient()
		fetcher = CountingFetcher(delay=0.01)
		results = await asyncio.gather(*(client.fetch_query(("dashboard", "stats"), fetcher) for _ in range(5)))
		return results, fetcher.calls

	results, calls = asyncio.run(scenario())
	assert calls == 1
	assert results == ["data-1"] * 5


def test_failed_fetch_records_error_and_raises():
	async def scenario():
		client = QueryClient()
		with pytest.raises(RuntimeError):
			await client.fetch_query(("k",), CountingFetcher(error=RuntimeError("down")))
		return client.get_query_state(("k",))

	state = asyncio.run(scenario())
	assert state.status == "error"
	assert str(state.error) == "down"


def test_invalidation_matches_by_prefix():
	async def scenario():
		client = QueryClient()
		students = CountingFetcher("students")
		detail = CountingFetcher("detail")
		teachers = CountingFetcher("teachers")
		await client.fetch_query(("students", "list", ()), students)
		await client.fetch_query(("students", "detail", "s1"), detail)
		await client.fetch_query(("teachers", "list", ()), teachers)

		marked = client.invalidate_queries(("students",))
		assert sorted(marked) == [("students", "detail", "s1"), ("students", "list", ())]
		assert client.get_query_state(("teachers", "list", ())).invalidated is False

		again = await client.fetch_query(("students", "list", ()), students)
		cached = await client.fetch_query(("teachers", "list", ()), teachers)
		return again, cached

	again, cached = asyncio.run(scenario())
	assert again == "students-2"
	assert cached == "teachers-1"


def test_refetch_reruns_remembered_fetchers():
	async def scenario():
		client = QueryClient()
		fetcher = CountingFetcher()
		await client.fetch_query(("attendance", "list", ()), fetcher)
		results = await client.refetch_queries(("attendance",))
		return results, fetcher.calls

	results, calls = asyncio.run(scenario())
	assert results == {("attendance", "list", ()): "data-2"}
	assert calls == 2


def test_mutation_invalidates_before_returning():
	async def scenario():
		client = QueryClient()
		fetcher = CountingFetcher()
		await client.fetch_query(("students", "list", ()), fetcher)
		seen = []

		async def create():
			return "s2"

		result = await client.run_mutation(create, invalidate=[("students",)], on_success=seen.append)
		state_after = client.get_query_state(("students", "list", ()))
		return result, seen, state_after, client.last_mutation

	result, seen, state_after, mutation = asyncio.run(scenario())
	assert result == "s2"
	assert seen == ["s2"]
	assert state_after.invalidated is True
	assert state_after.data == "data-1"
	assert mutation.status == "success"


def test_failed_mutation_does_not_invalidate():
	async def scenario():
		client = QueryClient()
		await client.fetch_query(("students", "list", ()), CountingFetcher())

		async def create():
			raise ValueError("rejected")

		with pytest.raises(ValueError):
			await client.run_mutation(create, invalidate=[("students",)])
		return client.get_query_state(("students", "list", ())), client.last_mutation

	state, mutation = asyncio.run(scenario())
	assert state.invalidated is False
	assert mutation.status == "error"
	assert str(mutation.error) == "rejected"


def test_key_factories_nest():
	keys = QueryKeys("students")
	assert keys.all() == ("students",)
	assert key_matches(keys.list({"grade": "10"}), keys.lists())
	assert key_matches(keys.detail("s1"), keys.all())
	assert not key_matches(keys.detail("s1"), keys.lists())
	assert key_matches(attendance_keys.calendar(2024, 3), attendance_keys.all())
	assert key_matches(parent_attendance_keys.child("k1"), parent_attendance_keys.all())


def test_filter_serialization_ignores_order_and_empty_values():
	assert serialize_filters({"b": 2, "a": 1, "c": None, "d": ""}) == (("a", 1), ("b", 2))
	assert QueryKeys("x").list({"status": None}) == QueryKeys("x").list()
	assert serialize_filters(None) == ()


class GatedFetcher:
	"""Fetcher that waits for ``release`` before returning or failing."""

	def __init__(self, value="data", error=None):
		self.started = asyncio.Event()
		self.release = asyncio.Event()
		self.value = value
		self.error = error

	async def __call__(self):
		self.started.set()
		await self.release.wait()
		if self.error is not None:
			raise self.error
		return self.value


def test_clear_during_fetch_drops_the_result():
	async def scenario():
		client = QueryClient()
		fetcher = GatedFetcher()
		pending = asyncio.ensure_future(client.fetch_query(("students", "list", ()), fetcher))
		await fetcher.started.wait()
		assert client.get_query_state(("students", "list", ())).is_loading

		client.clear()
		fetcher.release.set()
		result = await pending
		return client, result

	client, result = asyncio.run(scenario())
	assert result == "data"
	assert client.get_query_state(("students", "list", ())).status == "idle"
	assert client.keys() == []


def test_failed_fetch_after_removal_still_raises():
	async def scenario():
		client = QueryClient()
		fetcher = GatedFetcher(error=RuntimeError("down"))
		pending = asyncio.ensure_future(client.fetch_query(("students", "detail", "s1"), fetcher))
		await fetcher.started.wait()

		removed = client.remove_queries(("students",))
		fetcher.release.set()
		with pytest.raises(RuntimeError):
			await pending
		return client, removed

	client, removed = asyncio.run(scenario())
	assert removed == [("students", "detail", "s1")]
	assert client.keys() == []


def test_fetch_started_after_clear_is_kept():
	async def scenario():
		client = QueryClient()
		stale = GatedFetcher("old")
		old = asyncio.ensure_future(client.fetch_query(("k",), stale))
		await stale.started.wait()
		client.clear()

		fresh = await client.fetch_query(("k",), CountingFetcher("new"))
		stale.release.set()
		await old
		return client, fresh

	client, fresh = asyncio.run(scenario())
	assert fresh == "new-1"
	assert client.get_query_data(("k",)) == "new-1"


def test_remove_queries_by_prefix():
	async def scenario():
		client = QueryClient()
		await client.fetch_query(("students", "detail", "s1"), CountingFetcher())
		await client.fetch_query(("teachers", "list", ()), CountingFetcher())
		return client, client.remove_queries(("students",))

	client, removed = asyncio.run(scenario())
	assert removed == [("students", "detail", "s1")]
	assert client.keys() == [("teachers", "list", ())]
