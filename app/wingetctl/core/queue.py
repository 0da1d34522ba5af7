"""Sequential operation queue for package actions.

Holds the ordered history of requested install/uninstall/upgrade
operations and executes them one at a time against an Operator. A single
worker thread owns the drain loop; enqueue() only appends and wakes it.

Each transition appends its notifications to an event backlog in the same
critical section that changes the item, so the backlog is in transition
order. Listeners run outside every lock the public API takes: on a
dispatcher thread while the worker is running, on the transitioning thread
otherwise. Only one thread delivers at a time.

Locking:
    _lock       guards the item list, every status field and the event
                backlog. The condition _changed is bound to it.
    _run_lock   the single execution slot; held by drain() while an
                item is RUNNING.

Acquisition order is always _run_lock -> _lock.
"""

from __future__ import annotations

import logging
import threading
from collections import Counter, deque
from collections.abc import Callable
from enum import Enum

from wingetctl.models.queue import QueueAction, QueueItem, QueueItemStatus, QueueItemView
from wingetctl.operators.base import OperationCanceledError, Operator

logger = logging.getLogger(__name__)


class QueueEvent(str, Enum):
    """Notifications emitted by OperationQueue.

    Attributes:
        ITEM_ADDED: An item was appended to the queue.
        STATUS_CHANGED: An item changed status (any transition).
        COMPLETED: An item's action succeeded. Emitted before the matching
            STATUS_CHANGED; catalog refresh subscribes to this one only.
    """

    ITEM_ADDED = "item_added"
    STATUS_CHANGED = "status_changed"
    COMPLETED = "completed"


Listener = Callable[[QueueItemView], None]


class OperationQueue:
    """Executes queued package actions strictly one at a time.

    Items run in arrival order. A failing item never stops the queue, and
    terminal items are kept for the life of the queue.

    Attributes:
        operator: Package-action implementation used to run items.

    Example:
        >>> queue = OperationQueue(WingetOperator())
        >>> queue.subscribe(QueueEvent.COMPLETED, lambda item: print(item.package_id))
        >>> queue.enqueue("Google.Chrome", QueueAction.INSTALL)
        >>> queue.wait_idle()
    """

    def __init__(self, operator: Operator, *, autostart: bool = True) -> None:
        """Initialize the queue.

        Args:
            operator: Package-action implementation.
            autostart: Start the worker and dispatcher threads on the first
                enqueue. When False, callers run drain() themselves and
                listeners are called on the calling thread.
        """
        self.operator = operator
        self._autostart = autostart

        self._items: list[QueueItem] = []
        self._lock = threading.Lock()
        self._changed = threading.Condition(self._lock)
        self._run_lock = threading.Lock()

        self._listeners: dict[QueueEvent, list[Listener]] = {event: [] for event in QueueEvent}
        self._listeners_lock = threading.Lock()

        self._events: deque[tuple[QueueEvent, QueueItemView]] = deque()
        self._delivering = False
        self._dispatcher_running = False

        self._worker: threading.Thread | None = None
        self._dispatcher: threading.Thread | None = None
        self._worker_lock = threading.Lock()
        self._stopping = False

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, event: QueueEvent, callback: Listener) -> Callable[[], None]:
        """Register a listener for a queue event.

        Listeners are called in transition order, one at a time, and never
        while the queue holds a lock, so a slow listener does not hold up
        enqueue() or cancel(). Exceptions raised by a listener are logged
        and ignored. A listener must not call wait_idle().

        Args:
            event: Event to listen for.
            callback: Called with a snapshot of the affected item.

        Returns:
            A function that removes the listener again.
        """
        with self._listeners_lock:
            self._listeners[event].append(callback)

        def unsubscribe() -> None:
            with self._listeners_lock:
                if callback in self._listeners[event]:
                    self._listeners[event].remove(callback)

        return unsubscribe

    def _emit(self, event: QueueEvent, view: QueueItemView) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners[event])
        for listener in listeners:
            try:
                listener(view)
            except Exception:
                logger.exception("Queue listener failed for %s on %s", event.value, view.item_id)

    def _post_locked(self, event: QueueEvent, view: QueueItemView) -> None:
        """Append a notification to the backlog. Caller holds _lock."""
        self._events.append((event, view))
        self._changed.notify_all()

    def _deliver(self) -> None:
        """Call listeners for every backlog entry, unless another thread already does."""
        with self._changed:
            if self._delivering:
                return
            self._delivering = True
        try:
            while True:
                with self._changed:
                    if not self._events:
                        self._delivering = False
                        self._changed.notify_all()
                        return
                    event, view = self._events.popleft()
                self._emit(event, view)
        except BaseException:
            with self._changed:
                self._delivering = False
                self._changed.notify_all()
            raise

    def _flush(self) -> None:
        """Deliver on this thread when no dispatcher thread will."""
        with self._lock:
            inline = not self._dispatcher_running
        if inline:
            self._deliver()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def enqueue(self, package_id: str, action: QueueAction | str) -> QueueItemView:
        """Append a new PENDING item for a package action.

        Args:
            package_id: Package identifier.
            action: Requested mutation (enum or its string value).

        Returns:
            Snapshot of the queued item.
        """
        return self.enqueue_item(QueueItem(package_id=package_id, action=QueueAction(action)))

    def enqueue_item(self, item: QueueItem) -> QueueItemView:
        """Append a prebuilt item to the tail of the queue.

        Args:
            item: A PENDING item not yet known to this queue.

        Returns:
            Snapshot of the queued item.

        Raises:
            ValueError: If the item is not PENDING or is already queued.
        """
        if item.status != QueueItemStatus.PENDING:
            msg = f"Only pending items can be queued, got {item.status.value}"
            raise ValueError(msg)

        if self._autostart:
            self._ensure_threads()

        with self._changed:
            if any(existing.item_id == item.item_id for existing in self._items):
                msg = f"Queue item {item.item_id} is already queued"
                raise ValueError(msg)
            self._items.append(item)
            view = item.snapshot()
            self._post_locked(QueueEvent.ITEM_ADDED, view)
        logger.info("Queued %s of %s (%s)", item.action.value, item.package_id, item.item_id)
        self._flush()
        return view

    def cancel(self, item: QueueItemView | QueueItem | str) -> bool:
        """Cancel a pending or running item.

        A RUNNING item has its cancellation handle set, so the running
        process is stopped. A PENDING item is never started. Terminal
        items are left alone.

        Args:
            item: The item, its snapshot, or its item_id.

        Returns:
            True if the item was canceled, False if it was already terminal.

        Raises:
            ValueError: If the item is not part of this queue.
        """
        item_id = item if isinstance(item, str) else item.item_id

        with self._changed:
            target = self._find(item_id)
            if target is None:
                msg = f"Unknown queue item: {item_id}"
                raise ValueError(msg)
            if target.status.is_terminal:
                return False
            if target.status == QueueItemStatus.RUNNING and target.cancel_event is not None:
                target.cancel_event.set()
            target.status = QueueItemStatus.CANCELED
            target.log.append("Canceled")
            view = target.snapshot()
            self._post_locked(QueueEvent.STATUS_CHANGED, view)
        logger.info("Canceled %s of %s", view.action.value, view.package_id)
        self._flush()
        return True

    def get_queue(self) -> tuple[QueueItemView, ...]:
        """Return snapshots of all items in arrival order, including finished ones."""
        with self._lock:
            return tuple(item.snapshot() for item in self._items)

    def get_item(self, item_id: str) -> QueueItemView | None:
        """Return a snapshot of one item, or None if unknown."""
        with self._lock:
            item = self._find(item_id)
            return item.snapshot() if item is not None else None

    def summary(self) -> dict[QueueItemStatus, int]:
        """Count items per status."""
        with self._lock:
            counts = Counter(item.status for item in self._items)
        return {status: counts.get(status, 0) for status in QueueItemStatus}

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Block until no item is PENDING or RUNNING.

        Listeners of the last transition have returned by the time this
        reports idle.

        Args:
            timeout: Maximum time to wait in seconds. None waits forever.

        Returns:
            True if the queue became idle, False on timeout.
        """
        with self._changed:
            return self._changed.wait_for(self._is_settled_locked, timeout=timeout)

    def drain(self) -> int:
        """Run PENDING items, oldest first, until none remain.

        Safe to call concurrently with enqueue() and with other drain()
        calls; only one item executes at any time.

        Returns:
            Number of items this call executed.
        """
        executed = 0
        while True:
            with self._run_lock:
                item = self._start_next()
                if item is None:
                    return executed
                self._execute(item)
                executed += 1

    def stop(self, timeout: float | None = None) -> None:
        """Stop the worker thread after the drain in progress finishes.

        Notifications already recorded are still delivered.

        Args:
            timeout: Maximum time to wait for each thread to exit.
        """
        with self._changed:
            self._stopping = True
            self._changed.notify_all()
        current = threading.current_thread()
        for thread in (self._worker, self._dispatcher):
            if thread is not None and thread is not current:
                thread.join(timeout=timeout)
        # Anything recorded after the dispatcher exited
        self._flush()

    def __enter__(self) -> OperationQueue:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _find(self, item_id: str) -> QueueItem | None:
        for item in self._items:
            if item.item_id == item_id:
                return item
        return None

    def _is_settled_locked(self) -> bool:
        if self._events or self._delivering:
            return False
        return not any(
            item.status in (QueueItemStatus.PENDING, QueueItemStatus.RUNNING)
            for item in self._items
        )

    def _ensure_threads(self) -> None:
        with self._worker_lock:
            if self._stopping:
                return
            with self._lock:
                self._dispatcher_running = True
            if self._dispatcher is None or not self._dispatcher.is_alive():
                self._dispatcher = threading.Thread(
                    target=self._dispatcher_loop,
                    name="wingetctl-queue-events",
                    daemon=True,
                )
                self._dispatcher.start()
            if self._worker is None or not self._worker.is_alive():
                self._worker = threading.Thread(
                    target=self._worker_loop,
                    name="wingetctl-queue",
                    daemon=True,
                )
                self._worker.start()

    def _worker_loop(self) -> None:
        logger.debug("Queue worker started")
        while True:
            with self._changed:
                self._changed.wait_for(
                    lambda: self._stopping
                    or any(item.status == QueueItemStatus.PENDING for item in self._items)
                )
                if self._stopping:
                    break
            self.drain()
        logger.debug("Queue worker stopped")

    def _dispatcher_loop(self) -> None:
        while True:
            with self._changed:
                self._changed.wait_for(lambda: self._stopping or bool(self._events))
                if not self._events:
                    # Stopping; later transitions deliver on their own thread
                    self._dispatcher_running = False
                    self._changed.notify_all()
                    return
            self._deliver()

    def _start_next(self) -> QueueItem | None:
        """Move the oldest PENDING item to RUNNING and return it."""
        with self._changed:
            item = next(
                (i for i in self._items if i.status == QueueItemStatus.PENDING),
                None,
            )
            if item is None:
                return None
            item.status = QueueItemStatus.RUNNING
            item.progress = 0.0
            item.cancel_event = threading.Event()
            self._post_locked(QueueEvent.STATUS_CHANGED, item.snapshot())
        logger.info("Starting action %s on %s", item.action.value, item.package_id)
        self._flush()
        return item

    def _execute(self, item: QueueItem) -> None:
        """Run the operator for a RUNNING item and record the outcome."""
        cancel_event = item.cancel_event
        try:
            self.operator.execute(item.action, item.package_id, cancel_event)
        except OperationCanceledError:
            self._finish(item, QueueItemStatus.CANCELED, "Canceled")
        except Exception as e:
            logger.error("Action %s failed for %s: %s", item.action.value, item.package_id, e)
            self._finish(item, QueueItemStatus.FAILED, str(e) or type(e).__name__)
        else:
            if cancel_event is not None and cancel_event.is_set():
                self._finish(item, QueueItemStatus.CANCELED, "Canceled")
            else:
                self._finish(item, QueueItemStatus.COMPLETED, None)
        finally:
            with self._lock:
                item.cancel_event = None

    def _finish(self, item: QueueItem, status: QueueItemStatus, message: str | None) -> None:
        """Apply a terminal status unless the item already has one."""
        with self._changed:
            if item.status.is_terminal:
                # cancel() got there first
                return
            item.status = status
            if status == QueueItemStatus.COMPLETED:
                item.progress = 100.0
            if message:
                item.log.append(message)
            view = item.snapshot()
            if status == QueueItemStatus.COMPLETED:
                self._post_locked(QueueEvent.COMPLETED, view)
            self._post_locked(QueueEvent.STATUS_CHANGED, view)
        if status == QueueItemStatus.COMPLETED:
            logger.info("Completed %s of %s", item.action.value, item.package_id)
        self._flush()
