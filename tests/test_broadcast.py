import unittest

from src.services.broadcast import BroadcastChannel, sensor_data_event

class TestBroadcastChannel(unittest.TestCase):
    """Fan-out of ingest events to observers"""

    def setUp(self):
        self.channel = BroadcastChannel(queue_size=2)
        self.event = sensor_data_event("s1", "2026-10-18T10:00:00Z", 4)

    def test_publish_without_observers(self):
        self.assertEqual(self.channel.publish(self.event), 0)

    def test_every_observer_receives_event(self):
        first = self.channel.subscribe()
        second = self.channel.subscribe()

        self.assertEqual(self.channel.publish(self.event), 2)
        self.assertEqual(first.queue.get_nowait(), self.event)
        self.assertEqual(second.queue.get_nowait(), self.event)

    def test_late_subscriber_gets_no_backlog(self):
        self.channel.publish(self.event)
        late = self.channel.subscribe()
        self.assertTrue(late.queue.empty())

    def test_unsubscribed_observer_stops_receiving(self):
        observer = self.channel.subscribe()
        self.channel.unsubscribe(observer)
        self.channel.unsubscribe(observer)

        self.assertEqual(self.channel.publish(self.event), 0)
        self.assertEqual(self.channel.observer_count, 0)

    def test_full_queue_drops_event(self):
        slow = self.channel.subscribe()
        fast = self.channel.subscribe()
        for _ in range(2):
            self.channel.publish(self.event)
        fast.queue.get_nowait()

        self.assertEqual(self.channel.publish(self.event), 1)
        self.assertEqual(slow.queue.qsize(), 2)

    def test_event_shape(self):
        self.assertEqual(self.event, {
            "sensor_id": "s1",
            "timestamp": "2026-10-18T10:00:00Z",
            "count": 4,
            "type": "new_data",
        })

if __name__ == '__main__':
    unittest.main()
