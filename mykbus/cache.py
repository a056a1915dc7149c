"""
Cache scraped schedules and coordinate scrape passes.
"""

from typing import Callable, TypeAlias
import time
import threading
import traceback
import dataclasses

from mykbus.types import ScrapeContext
from mykbus.catalog import RouteCatalog
from mykbus.schedules import ScheduleSet, scrape_schedules
from mykbus.scrape.error import UpstreamUnavailable

Clock = Callable[[], float]


@dataclasses.dataclass(frozen=True)
class CacheEntry:
    schedule_set: ScheduleSet
    stored_at: float
    stale: bool = False


class ScheduleCache:
    """
    Holds the last good ScheduleSet.

    Invalidating only marks the held set stale: it stays available as a
    fallback until a later pass replaces it.
    """

    def __init__(self, ttl: float) -> None:
        self.ttl = ttl
        self._entry: CacheEntry | None = None
        self._lock = threading.Lock()

    @staticmethod
    def is_fresh(timestamp: float | None, now: float, ttl: float) -> bool:
        if timestamp is None:
            return False
        return 0 <= now - timestamp < ttl

    def get(self) -> ScheduleSet | None:
        with self._lock:
            return self._entry.schedule_set if self._entry is not None else None

    def fresh(self, now: float) -> ScheduleSet | None:
        """
        The held set, if it's inside the freshness window.
        """

        with self._lock:
            entry = self._entry

        if entry is None or entry.stale:
            return None
        if not self.is_fresh(entry.stored_at, now, self.ttl):
            return None
        return entry.schedule_set

    def put(self, schedule_set: ScheduleSet, timestamp: float) -> ScheduleSet:
        stored = dataclasses.replace(schedule_set, fetched_at=timestamp)

        with self._lock:
            self._entry = CacheEntry(stored, timestamp)

        return stored

    def invalidate(self) -> None:
        with self._lock:
            if self._entry is not None:
                self._entry = dataclasses.replace(self._entry, stale=True)


class PassWorker:
    """
    Runs one scrape pass in a daemon thread.

    A pass still running after the caller's timeout is reported as
    UpstreamUnavailable but keeps running; `running` stays true until the
    thread actually returns.
    """

    def __init__(self, fn: Callable[[], ScheduleSet]) -> None:
        self._fn = fn
        self._done = threading.Event()
        self._result: ScheduleSet | None = None
        self._error: BaseException | None = None
        self._thread = threading.Thread(
            target=self._target, name="scrape-pass", daemon=True
        )

    def _target(self) -> None:
        try:
            self._result = self._fn()
        except Exception as exc:  # pylint: disable=broad-exception-caught
            self._error = exc
        finally:
            self._done.set()

    @property
    def running(self) -> bool:
        return self._thread.is_alive() and not self._done.is_set()

    def run(self, timeout: float) -> ScheduleSet:
        self._thread.start()

        if not self._done.wait(timeout=timeout):
            raise UpstreamUnavailable(f"scrape pass timed out after {timeout:.0f}s")
        if self._error is not None:
            raise self._error
        assert self._result is not None

        return self._result


Outcome: TypeAlias = ScheduleSet | Exception


class TimetableService:
    """
    Serves schedules from the cache, running at most one scrape pass at a
    time; requests that arrive during a pass wait for it and share its
    outcome, success or failure.
    """

    def __init__(  # pylint: disable=too-many-arguments
        self,
        ctx: ScrapeContext,
        cache: ScheduleCache,
        url: str,
        catalog: RouteCatalog,
        pass_timeout: float,
        clock: Clock = time.time,
    ) -> None:
        self.ctx = ctx
        self.cache = cache
        self.url = url
        self.catalog = catalog
        self.pass_timeout = pass_timeout
        self.clock = clock
        self.passes = 0

        self._pass_lock = threading.Lock()
        self._worker: PassWorker | None = None
        # bumped after every pass, with that pass's outcome
        self._generation = 0
        self._outcome: Outcome | None = None

    @property
    def pass_running(self) -> bool:
        """
        Whether a scrape pass, possibly one that already timed out, is still
        running.
        """

        return self._worker is not None and self._worker.running

    def _run_pass(self) -> ScheduleSet:
        """
        Must hold `_pass_lock`.
        """

        if self.pass_running:
            raise UpstreamUnavailable("previous scrape pass is still running")

        self.passes += 1
        started = time.monotonic()
        self.ctx.logger.info("starting scrape pass #%d", self.passes)

        self._worker = PassWorker(
            lambda: scrape_schedules(self.ctx, self.url, self.catalog)
        )
        schedule_set = self._worker.run(self.pass_timeout)
        stored = self.cache.put(schedule_set, self.clock())

        self.ctx.logger.info(
            "scrape pass #%d done in %.1fs", self.passes, time.monotonic() - started
        )
        return stored

    def _run_shared_pass(self) -> ScheduleSet:
        """
        Must hold `_pass_lock`. Publishes the outcome to the requests queued
        on the lock.
        """

        try:
            stored = self._run_pass()
        except Exception as exc:
            self._publish(exc)
            raise

        self._publish(stored)
        return stored

    def _publish(self, outcome: Outcome) -> None:
        self._outcome = outcome
        self._generation += 1

    def _stale_or_raise(self, exc: UpstreamUnavailable) -> ScheduleSet:
        stale = self.cache.get()
        if stale is None:
            raise exc

        self.ctx.logger.warning("scrape pass failed; serving stale data: %s", exc)
        return stale

    def get_timetables(self) -> ScheduleSet:
        """
        The fresh cached schedules, a new pass's, or stale ones if the pass
        fails. Raises UpstreamUnavailable when there is nothing to serve.
        """

        generation = self._generation

        cached = self.cache.fresh(self.clock())
        if cached is not None:
            return cached

        with self._pass_lock:
            if self._generation != generation:
                # a pass finished while we waited
                outcome = self._outcome
                if isinstance(outcome, ScheduleSet):
                    return outcome
                return self._stale_or_raise(
                    UpstreamUnavailable(f"scrape pass failed: {outcome}")
                )

            cached = self.cache.fresh(self.clock())
            if cached is not None:
                return cached

            try:
                return self._run_shared_pass()
            except UpstreamUnavailable as exc:
                return self._stale_or_raise(exc)

    def refresh(self) -> ScheduleSet:
        """
        Force a new pass. On failure the previous schedules are kept (as
        stale) and the error is raised.
        """

        with self._pass_lock:
            self.cache.invalidate()

            try:
                return self._run_shared_pass()
            except UpstreamUnavailable:
                self.ctx.logger.error(
                    "forced refresh failed:\n%s", traceback.format_exc()
                )
                raise
