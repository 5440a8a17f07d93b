import asyncio
import time
from internal.logging import get_logger

STATE_TOPIC = "state"
EVENT_TOPIC = "event"


class Subscriber:
    __slots__ = ("name", "queue", "topics", "latest_only", "created_at", "received", "dropped")

    def __init__(self, name, queue, topics=None, latest_only=False):
        self.name = name
        self.queue = queue
        self.topics = topics or set()
        self.latest_only = latest_only
        self.created_at = time.time()
        self.received = 0
        self.dropped = 0

    def wants(self, topic):
        return not self.topics or topic in self.topics


class EventBus:
    """Copy-on-write pub/sub. Publish path is lock-free.

    ``latest_only`` subscribers (renderers) evict their oldest queued item
    instead of refusing the newest one when full; stale frames are worthless.
    """

    def __init__(self, queue_size=50):
        self._lock = asyncio.Lock()
        self._subscribers = {}
        self._subscribers_snapshot = []
        self._queue_size = queue_size
        self._log = get_logger()
        self.total_published = 0
        self.total_delivered = 0
        self.total_dropped = 0

    async def subscribe(self, name, max_queue_size=None, topics=None, latest_only=False):
        async with self._lock:
            if name in self._subscribers:
                return self._subscribers[name]
            subscriber = Subscriber(name, asyncio.Queue(maxsize=max_queue_size or self._queue_size),
                                    set(topics) if topics else set(), latest_only)
            self._subscribers[name] = subscriber
            self._subscribers_snapshot = list(self._subscribers.values())
            self._log.info(f"sub+ {name}")
            return subscriber

    async def unsubscribe(self, name):
        async with self._lock:
            if name not in self._subscribers:
                return False
            del self._subscribers[name]
            self._subscribers_snapshot = list(self._subscribers.values())
            self._log.info(f"sub- {name}")
            return True

    def _offer(self, subscriber, item):
        try:
            subscriber.queue.put_nowait(item)
            subscriber.received += 1
            return True
        except asyncio.QueueFull:
            subscriber.dropped += 1
            self.total_dropped += 1
            if not subscriber.latest_only:
                return False
        try:
            subscriber.queue.get_nowait()
            subscriber.queue.put_nowait(item)
            subscriber.received += 1
            return True
        except (asyncio.QueueEmpty, asyncio.QueueFull):
            return False

    async def publish(self, item, topic=""):
        delivered = 0
        for subscriber in self._subscribers_snapshot:
            if subscriber.wants(topic) and self._offer(subscriber, item):
                delivered += 1
        self.total_published += 1
        self.total_delivered += delivered
        return delivered

    async def publish_all(self, items, topic=""):
        delivered = 0
        for item in items:
            delivered += await self.publish(item, topic)
        return delivered

    def get_stats(self):
        return {
            "subscriber_count": len(self._subscribers_snapshot),
            "total_published": self.total_published,
            "total_delivered": self.total_delivered,
            "total_dropped": self.total_dropped,
        }

    async def get_subscriber_info(self):
        return [
            {   "name": subscriber.name,
                "topics": sorted(subscriber.topics),
                "queued": subscriber.queue.qsize(),
                "received": subscriber.received,
                "dropped": subscriber.dropped
            } for subscriber in self._subscribers_snapshot
        ]
