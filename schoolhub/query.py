"""In-memory query cache with stale times and prefix invalidation."""

import asyncio
import logging
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Tuple

from .const import DEFAULT_LIST_STALE_TIME

_LOGGER = logging.getLogger(__name__)

STATUS_IDLE = "idle"
STATUS_LOADING = "loading"
STATUS_SUCCESS = "success"
STATUS_ERROR = "error"

QueryKey = Tuple[Any, ...]
Fetcher = Callable[[], Awaitable[Any]]


@dataclass(frozen=True)
class QueryState:
	"""Snapshot of one cache entry; replaced, never mutated."""
	status: str = STATUS_IDLE
	data: Any = None
	error: Optional[BaseException] = None
	updated_at: Optional[datetime] = None
	invalidated: bool = False

	@property
	def is_loading(self) -> bool:
		return self.status == STATUS_LOADING

	def is_stale(self, stale_time: timedelta, now: Optional[datetime] = None) -> bool:
		if self.updated_at is None:
			return True
		now = now or datetime.now()
		return now - self.updated_at >= stale_time


@dataclass(frozen=True)
class MutationState:
	status: str = STATUS_IDLE
	data: Any = None
	error: Optional[BaseException] = None


def key_matches(key: QueryKey, prefix: QueryKey) -> bool:
	"""True when ``prefix`` is a leading slice of ``key``."""
	return tuple(key[:len(prefix)]) == tuple(prefix)


class QueryClient:
	"""Caches the results of async fetchers under tuple keys.

	A cached value is served while it is successful, not invalidated and
	younger than its stale time. Concurrent fetches of one key share a
	single in-flight task. Mutations invalidate key prefixes once they
	succeed so the next read goes back to the server.
	"""

	def __init__(self, default_stale_time: timedelta = DEFAULT_LIST_STALE_TIME) -> None:
		self.default_stale_time = default_stale_time
		self._queries: Dict[QueryKey, QueryState] = {}
		self._fetchers: Dict[QueryKey, Tuple[Fetcher, timedelta]] = {}
		self._tasks: Dict[QueryKey, "asyncio.Future[Any]"] = {}
		self.last_mutation = MutationState()

	def get_query_state(self, key: QueryKey) -> QueryState:
		return self._queries.get(tuple(key), QueryState())

	def get_query_data(self, key: QueryKey) -> Any:
		return self.get_query_state(key).data

	def keys(self, prefix: QueryKey = ()) -> List[QueryKey]:
		return [key for key in self._queries if key_matches(key, prefix)]

	async def fetch_query(
		self,
		key: QueryKey,
		fetcher: Fetcher,
		stale_time: Optional[timedelta] = None,
		force: bool = False,
	) -> Any:
		"""Return cached data for ``key`` or run ``fetcher``.

		Args:
			key: Cache key, usually built by ``QueryKeys``.
			fetcher: Zero-argument coroutine function returning the data.
			stale_time: How long a result stays fresh. Defaults to the
				client's ``default_stale_time``.
			force: Skip the cache and fetch even when fresh.

		Returns:
			The fetched or cached data.
		"""
		key = tuple(key)
		if stale_time is None:
			stale_time = self.default_stale_time
		self._fetchers[key] = (fetcher, stale_time)

		state = self._queries.get(key)
		if (
			not force
			and state is not None
			and state.status == STATUS_SUCCESS
			and not state.invalidated
			and not state.is_stale(stale_time)
		):
			_LOGGER.debug(f"Cache hit for {key}")
			return state.data

		# Single-flight: reuse the in-flight task if present
		task = self._tasks.get(key)
		if task is None or task.done():
			task = asyncio.ensure_future(self._run_fetch(key, fetcher))
			self._tasks[key] = task
			task.add_done_callback(lambda done, key=key: self._forget_task(key, done))
		else:
			_LOGGER.debug(f"Joining in-flight fetch for {key}")

		# A cancelled caller must not cancel the shared fetch
		return await asyncio.shield(task)

	async def _run_fetch(self, key: QueryKey, fetcher: Fetcher) -> Any:
		previous = self._queries.get(key, QueryState())
		self._queries[key] = replace(previous, status=STATUS_LOADING, error=None, invalidated=False)
		_LOGGER.debug(f"Fetching {key}")
		task = asyncio.current_task()
		try:
			data = await fetcher()
		except Exception as e:
			_LOGGER.warning(f"Query {key} failed: {e}")
			if self._owns(key, task):
				self._queries[key] = replace(self._queries[key], status=STATUS_ERROR, error=e)
			raise
		if not self._owns(key, task):
			# Removed while loading; the caller still gets the data
			_LOGGER.debug(f"Dropping result for removed query {key}")
			return data
		# Invalidated while loading: keep the result but do not trust it
		invalidated = self._queries[key].invalidated
		self._queries[key] = QueryState(
			status=STATUS_SUCCESS,
			data=data,
			updated_at=datetime.now(),
			invalidated=invalidated,
		)
		return data

	def _owns(self, key: QueryKey, task: Optional["asyncio.Task[Any]"]) -> bool:
		return key in self._queries and self._tasks.get(key) is task

	def _forget_task(self, key: QueryKey, task: "asyncio.Future[Any]") -> None:
		if self._tasks.get(key) is task:
			del self._tasks[key]
		if not task.cancelled():
			# Retrieved so an unawaited failure is not reported twice
			task.exception()

	def invalidate_queries(self, prefix: QueryKey = ()) -> List[QueryKey]:
		"""Mark every entry under ``prefix`` as invalidated.

		Returns:
			The keys that were marked.
		"""
		matched = self.keys(prefix)
		for key in matched:
			self._queries[key] = replace(self._queries[key], invalidated=True)
		if matched:
			_LOGGER.debug(f"Invalidated {len(matched)} queries under {tuple(prefix)}")
		return matched

	async def refetch_queries(self, prefix: QueryKey = ()) -> Dict[QueryKey, Any]:
		"""Re-run the last fetcher of every known key under ``prefix``."""
		keys = [key for key in self.keys(prefix) if key in self._fetchers]
		results = await asyncio.gather(*(
			self.fetch_query(key, self._fetchers[key][0], self._fetchers[key][1], force=True)
			for key in keys
		))
		return dict(zip(keys, results))

	def remove_queries(self, prefix: QueryKey = ()) -> List[QueryKey]:
		"""Forget every entry under ``prefix``.

		A fetch still in flight for a removed key finishes for its callers
		but its result is not stored.
		"""
		matched = self.keys(prefix)
		for key in matched:
			del self._queries[key]
			self._fetchers.pop(key, None)
			self._tasks.pop(key, None)
		return matched

	def clear(self) -> None:
		self._queries.clear()
		self._fetchers.clear()
		self._tasks.clear()

	async def run_mutation(
		self,
		mutation_fn: Callable[..., Awaitable[Any]],
		*args: Any,
		invalidate: Iterable[QueryKey] = (),
		on_success: Optional[Callable[[Any], Any]] = None,
		**kwargs: Any,
	) -> Any:
		"""Run a write and invalidate ``invalidate`` prefixes on success.

		Invalidation happens before this returns, so a read issued after
		the mutation never sees a cached pre-mutation value. Nothing is
		written to the cache optimistically.
		"""
		self.last_mutation = MutationState(status=STATUS_LOADING)
		try:
			result = await mutation_fn(*args, **kwargs)
		except Exception as e:
			self.last_mutation = MutationState(status=STATUS_ERROR, error=e)
			_LOGGER.warning(f"Mutation {getattr(mutation_fn, '__name__', mutation_fn)} failed: {e}")
			raise

		if on_success is not None:
			outcome = on_success(result)
			if asyncio.iscoroutine(outcome):
				await outcome
		for prefix in invalidate:
			self.invalidate_queries(prefix)
		self.last_mutation = MutationState(status=STATUS_SUCCESS, data=result)
		return result
