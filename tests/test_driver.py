import time

import pytest
from kafka.errors import KafkaTimeoutError, TopicAlreadyExistsError

from relay import ProvisioningError, RelayContext, RelayDriver, RelayState, RelaySettings


def sent_lines(output):
    return [line for line in output.splitlines() if line.startswith("Send to Kafka: ")]


def received_lines(output):
    return [line for line in output.splitlines() if line.startswith("Message(")]


def test_end_to_end_relay(fake_kafka, settings, capsys):
    driver = RelayDriver.from_settings(settings)

    assert driver.run() == 0

    out = capsys.readouterr().out
    assert sent_lines(out) == [f"Send to Kafka: foo{i}" for i in range(10)]
    received = received_lines(out)
    assert len(received) == 10
    for i, line in enumerate(received):
        assert f"payload='foo{i}'" in line
    # Every send line comes before the first received line
    assert out.index("Send to Kafka: foo9") < out.index("Message(")

    assert driver.state == RelayState.CLOSED
    assert [m.payload for m in driver.received] == driver.sent
    assert all(m.key == "si.key" for m in driver.received)


def test_sends_exactly_count_messages_in_order(fake_kafka, settings):
    driver = RelayDriver.from_settings(settings)
    driver.run()

    producer = fake_kafka.producers[0]
    assert producer.sent == [("test-topic", "si.key", f"foo{i}") for i in range(10)]


def test_resources_released_after_run(fake_kafka, settings):
    driver = RelayDriver.from_settings(settings)
    driver.run()

    assert fake_kafka.producers[0].closed
    assert fake_kafka.consumers[0].closed
    assert not driver.context.subscriber.is_running
    assert not driver.context.provisioner.is_running


def test_existing_topic_is_not_an_error(fake_kafka, settings):
    fake_kafka.admin.create_topics.side_effect = TopicAlreadyExistsError()

    assert RelayDriver.from_settings(settings).run() == 0


def test_provisioning_failure_aborts_before_publishing(fake_kafka, settings):
    fake_kafka.admin.create_topics.side_effect = KafkaTimeoutError("no controller")
    driver = RelayDriver.from_settings(settings)

    with pytest.raises(ProvisioningError):
        driver.run()

    assert driver.sent == []
    assert fake_kafka.producers == []
    assert fake_kafka.consumers == []
    assert driver.state == RelayState.CLOSED


def test_drain_with_no_messages_ends_after_one_timeout(fake_kafka, settings):
    driver = RelayDriver.from_settings(settings.model_copy(update={"message_count": 0}))

    started = time.monotonic()
    assert driver.run() == 0
    elapsed = time.monotonic() - started

    assert driver.received == []
    assert settings.reply_timeout <= elapsed < settings.reply_timeout + 2


def test_drain_stops_within_timeout_of_last_message(fake_kafka, settings):
    context = RelayContext(settings)
    driver = RelayDriver(context, count=3)
    context.provision()
    context.open_clients()
    try:
        driver.publish()
        started = time.monotonic()
        driver.drain()
        elapsed = time.monotonic() - started
    finally:
        context.close()

    assert [m.payload for m in driver.received] == ["foo0", "foo1", "foo2"]
    assert elapsed < settings.reply_timeout + 2


def test_initial_offset_skips_earlier_messages(fake_kafka):
    for i in range(3):
        fake_kafka.broker.append("test-topic", None, f"old{i}".encode())
    settings = RelaySettings(initial_offset=3, message_count=2, reply_timeout_ms=300)

    driver = RelayDriver.from_settings(settings)
    driver.run()

    assert [m.payload for m in driver.received] == ["foo0", "foo1"]


def test_context_manager_closes_on_error(fake_kafka, settings):
    with pytest.raises(RuntimeError):
        with RelayContext(settings) as context:
            context.gateway.send_to_kafka("foo0")
            raise RuntimeError("boom")

    assert fake_kafka.producers[0].closed
    assert fake_kafka.consumers[0].closed
    assert context.gateway is None


def test_stdout_holds_only_sent_and_received_lines(fake_kafka, settings, capsys):
    RelayDriver.from_settings(settings.model_copy(update={"message_count": 3})).run()

    captured = capsys.readouterr()
    lines = captured.out.splitlines()
    assert lines[:3] == ["Send to Kafka: foo0", "Send to Kafka: foo1", "Send to Kafka: foo2"]
    assert len(lines) == 6
    assert all(line.startswith("Message(payload='foo") for line in lines[3:])
    assert "[RELAY] DRAINING -> CLOSED" in captured.err
