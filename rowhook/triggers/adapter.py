"""Stream adapters feeding raw row batches into the dispatch engine."""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from pymysqlreplication import BinLogStreamReader
from pymysqlreplication.row_event import DeleteRowsEvent, UpdateRowsEvent, WriteRowsEvent

from rowhook.triggers.models import ACTIONS, RowsBatch

if TYPE_CHECKING:
    from rowhook.config.models import MySQLConfig, StreamConfig

logger = logging.getLogger(__name__)

BatchCallback = Callable[[RowsBatch], Any]
ErrorCallback = Callable[[BaseException], Any]

ROW_EVENT_KINDS: tuple[str, ...] = tuple(ACTIONS)

_EVENT_CLASSES = {
    "writerows": WriteRowsEvent,
    "updaterows": UpdateRowsEvent,
    "deleterows": DeleteRowsEvent,
}


class BinlogAdapter(ABC):
    """Abstract source of per-table row batches."""

    @abstractmethod
    def start(
        self,
        on_batch: BatchCallback,
        on_error: ErrorCallback,
        *,
        only_kinds: Iterable[str] = ROW_EVENT_KINDS,
        start_at_end: bool = True,
    ) -> None: ...

    @abstractmethod
    def stop(self) -> None: ...

    @abstractmethod
    def join(self, timeout: float | None = None) -> None: ...

    @property
    @abstractmethod
    def running(self) -> bool: ...


def event_kind(binlog_event: Any) -> str:
    """``WriteRowsEvent`` -> ``writerows``; other classes map to their lowered name."""
    name = type(binlog_event).__name__
    if name.endswith("Event"):
        name = name[: -len("Event")]
    return name.lower()


def to_batch(binlog_event: Any) -> RowsBatch:
    """Normalize one pymysqlreplication rows event into a ``RowsBatch``."""
    kind = event_kind(binlog_event)
    rows: list[dict[str, Any]] = []
    for row in binlog_event.rows:
        if "values" in row:
            rows.append(dict(row["values"]))
        else:
            rows.append({"before": dict(row["before_values"]), "after": dict(row["after_values"])})
    return RowsBatch(
        schema=binlog_event.schema,
        table=binlog_event.table,
        kind=kind,
        timestamp=datetime.fromtimestamp(binlog_event.timestamp, tz=timezone.utc),
        rows=tuple(rows),
        table_id=getattr(binlog_event, "table_id", None),
    )


class MySQLBinlogAdapter(BinlogAdapter):
    """MySQL row-based binlog reader on a background thread.

    Every ``start`` gets its own stop event, so a reader thread left over
    from an earlier run never reports errors into, or delivers batches to,
    the run that replaced it.
    """

    def __init__(self, settings: MySQLConfig, stream: StreamConfig) -> None:
        self._settings = settings
        self._stream_config = stream
        self._reader: Any | None = None
        self._thread: threading.Thread | None = None
        self._stop_event: threading.Event | None = None
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        thread, stop_event = self._thread, self._stop_event
        return (
            thread is not None
            and thread.is_alive()
            and stop_event is not None
            and not stop_event.is_set()
        )

    def start(
        self,
        on_batch: BatchCallback,
        on_error: ErrorCallback,
        *,
        only_kinds: Iterable[str] = ROW_EVENT_KINDS,
        start_at_end: bool = True,
    ) -> None:
        with self._lock:
            if self.running:
                return
            stop_event = threading.Event()
            reader = self._open_reader(only_kinds, start_at_end)
            self._stop_event = stop_event
            self._reader = reader
            self._thread = threading.Thread(
                target=self._read_loop,
                args=(reader, stop_event, on_batch, on_error),
                name="rowhook-binlog",
                daemon=True,
            )
            self._thread.start()
        logger.info(
            "Binlog stream started host=%s port=%s server_id=%s start_at_end=%s",
            self._settings.host,
            self._settings.port,
            self._settings.server_id,
            start_at_end,
        )

    def _open_reader(self, only_kinds: Iterable[str], start_at_end: bool) -> Any:
        only_events = [_EVENT_CLASSES[kind] for kind in only_kinds if kind in _EVENT_CLASSES]
        stream_kwargs: dict[str, Any] = {
            "connection_settings": self._settings.connection_settings(),
            "server_id": self._settings.server_id,
            "blocking": self._stream_config.blocking,
            "only_events": only_events,
            "resume_stream": start_at_end,
        }
        if self._stream_config.only_schemas:
            stream_kwargs["only_schemas"] = list(self._stream_config.only_schemas)
        if self._stream_config.only_tables:
            stream_kwargs["only_tables"] = list(self._stream_config.only_tables)
        return BinLogStreamReader(**stream_kwargs)

    def _read_loop(
        self,
        reader: Any,
        stopping: threading.Event,
        on_batch: BatchCallback,
        on_error: ErrorCallback,
    ) -> None:
        try:
            for binlog_event in reader:
                if stopping.is_set():
                    break
                on_batch(to_batch(binlog_event))
                # stop() may have been called while the handler ran
                if stopping.is_set():
                    break
        except Exception as exc:
            if stopping.is_set():
                logger.debug("Binlog reader closed during shutdown: %s", exc)
            else:
                on_error(exc)
        finally:
            self._close_reader(reader)

    def stop(self) -> None:
        with self._lock:
            stop_event, self._stop_event = self._stop_event, None
            reader, self._reader = self._reader, None
        if stop_event is not None:
            stop_event.set()
        if reader is not None:
            self._close_reader(reader)
            logger.info("Binlog stream stopped")

    def join(self, timeout: float | None = None) -> None:
        thread = self._thread
        if thread is None or thread is threading.current_thread():
            return
        thread.join(timeout)

    @staticmethod
    def _close_reader(reader: Any) -> None:
        try:
            reader.close()
        except Exception as exc:
            logger.debug("Ignoring error while closing binlog reader: %s", exc)
