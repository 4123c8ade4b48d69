"""
Subscription Tests
==================
"""

import threading

from pagepix.subscriptions import ListenerRegistry, Subscription, SubscriptionGroup


class TestSubscription:
    def test_release_is_idempotent(self):
        calls = []
        sub = Subscription(lambda: calls.append(1))
        assert sub.release() is True
        assert sub.release() is False
        assert calls == [1]
        assert sub.active is False

    def test_context_manager_releases(self):
        with Subscription() as sub:
            assert sub.active
        assert not sub.active


class TestListenerRegistry:
    def test_notify_counts_calls(self):
        registry = ListenerRegistry()
        seen = []
        registry.subscribe(seen.append)
        registry.subscribe(seen.append)
        assert registry.notify("x") == 2
        assert seen == ["x", "x"]

    def test_released_listener_not_called(self):
        registry = ListenerRegistry()
        seen = []
        sub = registry.subscribe(seen.append)
        sub.release()
        assert registry.notify("x") == 0
        assert len(registry) == 0
        assert seen == []

    def test_release_during_notify_skips_later_listener(self):
        registry = ListenerRegistry()
        seen = []
        second = None

        def first(value):
            seen.append(("first", value))
            second.release()

        registry.subscribe(first)
        second = registry.subscribe(lambda value: seen.append(("second", value)))
        assert registry.notify(1) == 1
        assert seen == [("first", 1)]

    def test_concurrent_subscribe(self):
        registry = ListenerRegistry()

        def worker():
            for _ in range(100):
                registry.subscribe(lambda *_: None)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(registry) == 400


class TestSubscriptionGroup:
    def test_release_all(self):
        registry = ListenerRegistry()
        group = SubscriptionGroup()
        group.add(registry.subscribe(lambda *_: None))
        group.add(registry.subscribe(lambda *_: None))
        assert group.release() is True
        assert group.release() is False
        assert len(registry) == 0
        assert group.active is False

    def test_add_after_release_releases_immediately(self):
        group = SubscriptionGroup()
        group.release()
        sub = group.add(Subscription())
        assert sub.active is False
