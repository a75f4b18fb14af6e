from path_tracker.core import Publisher


def test_subscribers_called_in_order():
    publisher = Publisher("test")
    calls = []
    publisher.subscribe(lambda e: calls.append(("a", e)))
    publisher.subscribe(lambda e: calls.append(("b", e)))

    publisher.publish(1)
    publisher.publish(2)

    assert calls == [("a", 1), ("b", 1), ("a", 2), ("b", 2)]


def test_failing_subscriber_does_not_block_others(caplog):
    publisher = Publisher("test")
    received = []

    def broken(event):
        raise ValueError("boom")

    publisher.subscribe(broken)
    publisher.subscribe(received.append)

    publisher.publish("event")

    assert received == ["event"]
    assert "Subscriber of 'test' failed" in caplog.text


def test_cancelled_subscription_stops_delivery():
    publisher = Publisher("test")
    received = []
    subscription = publisher.subscribe(received.append)

    publisher.publish(1)
    subscription.cancel()
    subscription.cancel()
    publisher.publish(2)

    assert received == [1]
    assert not subscription.active
    assert len(publisher) == 0


def test_subscriber_may_unsubscribe_while_notified():
    publisher = Publisher("test")
    received = []
    holder = {}

    def once(event):
        received.append(event)
        holder["sub"].cancel()

    holder["sub"] = publisher.subscribe(once)
    publisher.publish(1)
    publisher.publish(2)

    assert received == [1]
