"""Registry and scheduler of group reminder timers, persisted in SQLite."""

from __future__ import annotations

import logging
import re
import sqlite3
import threading
from datetime import datetime, timedelta
from typing import Callable

from zeroplug.message import Segment, at_all, image, text
from zeroplug.timerspec import Timer
from zeroplug.wakeup import next_wake_time, should_fire

log = logging.getLogger(__name__)

Sender = Callable[[int, int, list[Segment]], None]

_MONTH_NAMES = {
    name: index
    for index, name in enumerate(
        ["jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"],
        start=1,
    )
}
_DAY_NAMES = {
    name: index for index, name in enumerate(["sun", "mon", "tue", "wed", "thu", "fri", "sat"])
}
_DESCRIPTORS = {
    "@yearly": "0 0 1 1 *",
    "@annually": "0 0 1 1 *",
    "@monthly": "0 0 1 * *",
    "@weekly": "0 0 * * 0",
    "@daily": "0 0 * * *",
    "@midnight": "0 0 * * *",
    "@hourly": "0 * * * *",
}
_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


def _parse_duration(spec: str) -> timedelta:
    position, seconds = 0, 0.0
    for match in _DURATION_PART.finditer(spec):
        if match.start() != position:
            break
        seconds += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        position = match.end()
    if not spec or position != len(spec):
        raise ValueError(f"invalid duration {spec!r}")
    return timedelta(seconds=max(1, int(seconds)))


def _parse_value(token: str, names: dict[str, int]) -> int:
    if token.lower() in names:
        return names[token.lower()]
    if not token.isdigit():
        raise ValueError(f"invalid cron value {token!r}")
    return int(token)


def _parse_field(
    spec: str, low: int, high: int, names: dict[str, int]
) -> tuple[frozenset[int], bool]:
    values: set[int] = set()
    star = False
    for part in spec.split(","):
        range_part, _, step_part = part.partition("/")
        step = 1
        if step_part:
            if not step_part.isdigit() or int(step_part) == 0:
                raise ValueError(f"invalid cron step {part!r}")
            step = int(step_part)
        part_star = False
        if range_part in ("*", "?"):
            start, end = low, high
            part_star = step == 1
        else:
            first, dash, last = range_part.partition("-")
            start = _parse_value(first, names)
            if dash:
                end = _parse_value(last, names)
            elif step_part:
                end = high
            else:
                end = start
        if start < low or end > high or start > end:
            raise ValueError(f"cron value out of range: {part!r}")
        values.update(range(start, end + 1, step))
        star = star or part_star
    return frozenset(values), star


class CronSchedule:
    """Standard five field cron expression, plus @descriptors and @every."""

    def __init__(self, expression: str) -> None:
        self.expression = expression
        spec = expression.strip()
        self._every: timedelta | None = None
        if spec.startswith("@every "):
            self._every = _parse_duration(spec[len("@every "):].strip())
            return
        spec = _DESCRIPTORS.get(spec, spec)
        fields = spec.split()
        if len(fields) != 5:
            raise ValueError(f"expected exactly 5 fields, found {len(fields)}: {expression!r}")
        self._minutes, _ = _parse_field(fields[0], 0, 59, {})
        self._hours, _ = _parse_field(fields[1], 0, 23, {})
        self._days, self._days_star = _parse_field(fields[2], 1, 31, {})
        self._months, _ = _parse_field(fields[3], 1, 12, _MONTH_NAMES)
        self._weekdays, self._weekdays_star = _parse_field(fields[4], 0, 6, _DAY_NAMES)

    def _day_matches(self, moment: datetime) -> bool:
        dom = moment.day in self._days
        dow = moment.isoweekday() % 7 in self._weekdays
        if self._days_star or self._weekdays_star:
            return dom and dow
        return dom or dow

    def next_after(self, moment: datetime) -> datetime:
        """First activation strictly after ``moment``."""
        if self._every is not None:
            return moment.replace(microsecond=0) + self._every
        current = moment.replace(second=0, microsecond=0) + timedelta(minutes=1)
        limit = current.year + 5
        while current.year <= limit:
            if current.month not in self._months:
                year, month = divmod(current.month, 12)
                current = current.replace(
                    year=current.year + year, month=month + 1, day=1, hour=0, minute=0
                )
            elif not self._day_matches(current):
                current = current.replace(hour=0, minute=0) + timedelta(days=1)
            elif current.hour not in self._hours:
                current = current.replace(minute=0) + timedelta(hours=1)
            elif current.minute not in self._minutes:
                current += timedelta(minutes=1)
            else:
                return current
        raise ValueError(f"cron expression never fires: {self.expression!r}")


def timer_message(timer: Timer) -> list[Segment]:
    """Message a firing timer sends to its group."""
    segments = [at_all(), text(timer.alert)]
    if timer.url:
        segments.append(image(timer.url).with_data("cache", "0"))
    return segments


class Clock:
    """Holds timers, runs them in background threads and keeps them in a database."""

    def __init__(self, db_path: str, send: Sender) -> None:
        self._send = send
        self._lock = threading.RLock()
        self._wakeup = threading.Condition(self._lock)
        self._closed = False
        self._timers: dict[int, Timer] = {}
        self._stops: dict[int, threading.Event] = {}
        self._cron: dict[int, tuple[CronSchedule, Timer, datetime]] = {}
        self._db = sqlite3.connect(db_path, check_same_thread=False)
        self._db.execute(
            "CREATE TABLE IF NOT EXISTS timer (id INTEGER PRIMARY KEY, emdwhm INTEGER,"
            " sid INTEGER, gid INTEGER, alert TEXT, cron TEXT, url TEXT)"
        )
        self._db.commit()
        self._cron_thread = threading.Thread(target=self._run_cron, daemon=True)
        self._cron_thread.start()
        rows = self._db.execute(
            "SELECT id, emdwhm, sid, gid, alert, cron, url FROM timer"
        ).fetchall()
        for row in rows:
            self.register_timer(Timer(*row), save=False)

    def __enter__(self) -> "Clock":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def register_timer(self, timer: Timer, save: bool) -> bool:
        """Start a timer; with ``save`` its id is computed and it is stored."""
        if save:
            timer.id = timer.timer_id()
        key = timer.id
        with self._lock:
            old = self._timers.get(key)
            if old is not None and old is not timer:
                self._stop_worker(key)
        log.info("registering timer %08x", key)
        if timer.cron:
            try:
                schedule = CronSchedule(timer.cron)
            except ValueError as err:
                timer.alert = str(err)
                return False
            with self._wakeup:
                self._cron[key] = (schedule, timer, schedule.next_after(datetime.now()))
                self._wakeup.notify_all()
            try:
                if save:
                    self.add_timer_into_db(timer)
            except sqlite3.Error as err:
                log.error("cannot store timer %08x: %s", key, err)
                return False
            self.add_timer_into_map(timer)
            return True
        if save:
            try:
                self.add_timer_into_db(timer)
            except sqlite3.Error as err:
                log.error("cannot store timer %08x: %s", key, err)
        self.add_timer_into_map(timer)
        stop = threading.Event()
        with self._lock:
            self._stops[key] = stop
        threading.Thread(target=self._run_timer, args=(timer, stop), daemon=True).start()
        return True

    def cancel_timer(self, key: int) -> bool:
        """Stop and forget a timer; False if there is no such timer."""
        with self._lock:
            if self._timers.pop(key, None) is None:
                return False
            self._stop_worker(key)
            try:
                self._db.execute("DELETE FROM timer WHERE id = ?", (key,))
                self._db.commit()
            except sqlite3.Error as err:
                log.error("cannot delete timer %08x: %s", key, err)
                return False
        return True

    def list_timers(self, group_id: int) -> list[str]:
        """Human readable schedules of a group's timers."""
        result = []
        with self._lock:
            timers = list(self._timers.values())
        for timer in timers:
            if timer.group_id != group_id:
                continue
            info = timer.info()
            line = info[info.index("]") + 1:] + "\n"
            line = line.replace("-1", "每")
            line = line.replace("月0日0周", "月周天")
            line = line.replace("月0日", "月")
            line = line.replace("日0周", "日")
            result.append(line)
        return result

    def get_timer(self, key: int) -> Timer | None:
        with self._lock:
            return self._timers.get(key)

    def add_timer_into_db(self, timer: Timer) -> None:
        with self._lock:
            self._db.execute(
                "REPLACE INTO timer (id, emdwhm, sid, gid, alert, cron, url)"
                " VALUES (?, ?, ?, ?, ?, ?, ?)",
                (
                    timer.id,
                    timer.packed,
                    timer.self_id,
                    timer.group_id,
                    timer.alert,
                    timer.cron,
                    timer.url,
                ),
            )
            self._db.commit()

    def add_timer_into_map(self, timer: Timer) -> None:
        with self._lock:
            self._timers[timer.id] = timer

    def close(self) -> None:
        """Stop all workers and close the database."""
        with self._wakeup:
            if self._closed:
                return
            self._closed = True
            for stop in self._stops.values():
                stop.set()
            self._stops.clear()
            self._cron.clear()
            self._wakeup.notify_all()
        self._cron_thread.join()
        with self._lock:
            self._db.close()

    def _stop_worker(self, key: int) -> None:
        stop = self._stops.pop(key, None)
        if stop is not None:
            stop.set()
        if self._cron.pop(key, None) is not None:
            self._wakeup.notify_all()

    def _fire(self, timer: Timer) -> None:
        try:
            self._send(timer.self_id, timer.group_id, timer_message(timer))
        except Exception:
            log.exception("timer %08x failed to send", timer.id)

    def _run_timer(self, timer: Timer, stop: threading.Event) -> None:
        while timer.enabled() and not stop.is_set():
            wake = next_wake_time(timer, datetime.now())
            log.info("timer %08x sleeps until %s", timer.id, wake)
            if stop.wait(max(0.0, (wake - datetime.now()).total_seconds())):
                return
            if timer.enabled() and should_fire(timer, datetime.now()):
                self._fire(timer)

    def _run_cron(self) -> None:
        while True:
            with self._wakeup:
                if self._closed:
                    return
                now = datetime.now()
                due = []
                for key, (schedule, timer, when) in list(self._cron.items()):
                    if when <= now:
                        due.append(timer)
                        self._cron[key] = (schedule, timer, schedule.next_after(now))
                if not due:
                    soonest = min((when for _, _, when in self._cron.values()), default=None)
                    timeout = None if soonest is None else max(0.0, (soonest - now).total_seconds())
                    self._wakeup.wait(timeout)
                    continue
            for timer in due:
                self._fire(timer)