"""Unit tests for the notification collector."""

from smart_pub.notifications import Level, Notifier


class TestNotifier:
    def test_messages_kept_in_order(self):
        notifier = Notifier()
        notifier.info("one")
        notifier.error("two")
        notifier.warning("three")

        assert [n.level for n in notifier.messages] == [Level.INFO, Level.ERROR, Level.WARNING]

    def test_of_level(self):
        notifier = Notifier()
        notifier.info("added")
        notifier.error("failed")

        assert notifier.of_level(Level.ERROR) == ["failed"]
        assert notifier.of_level(Level.WARNING) == []
