import threading
import unittest

from core.scroll_sync import DIFF, SOURCE, ScrollSynchronizer, ThreadingScheduler


class FakePane:
    def __init__(self) -> None:
        self.scroll_top = 0.0
        self.writes = []

    def scroll_to(self, top, smooth=True) -> None:
        self.writes.append((top, smooth))
        self.scroll_top = top


class FakeTimer:
    def __init__(self, clock, due, callback) -> None:
        self.clock = clock
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Manual clock: nothing fires until advance() is called."""

    def __init__(self) -> None:
        self.now = 0.0
        self.timers = []

    def call_later(self, delay_s, callback):
        timer = FakeTimer(self, self.now + delay_s, callback)
        self.timers.append(timer)
        return timer

    def advance(self, seconds) -> None:
        self.now += seconds
        due = [t for t in self.timers if not t.cancelled and t.due <= self.now]
        self.timers = [t for t in self.timers if t not in due]
        for timer in sorted(due, key=lambda t: t.due):
            timer.callback()

    @property
    def live(self):
        return [t for t in self.timers if not t.cancelled]


class TestScrollSynchronizer(unittest.TestCase):
    def setUp(self) -> None:
        self.source = FakePane()
        self.diff = FakePane()
        self.clock = FakeScheduler()
        self.sync = ScrollSynchronizer(self.source, self.diff, delay_ms=50, scheduler=self.clock)

    def test_source_scroll_mirrors_to_diff_after_delay(self) -> None:
        self.source.scroll_top = 120
        self.sync.on_source_scroll()
        self.assertTrue(self.sync.is_pending(SOURCE))
        self.assertEqual(self.diff.writes, [])

        self.clock.advance(0.05)
        self.assertEqual(self.diff.writes, [(120, True)])
        self.assertFalse(self.sync.is_pending(SOURCE))

    def test_diff_scroll_mirrors_to_source(self) -> None:
        self.diff.scroll_top = 300
        self.sync.on_diff_scroll()
        self.clock.advance(0.05)
        self.assertEqual(self.source.writes, [(300, True)])

    def test_burst_collapses_to_one_write(self) -> None:
        for step in range(10):
            self.source.scroll_top = step * 10
            self.sync.on_source_scroll()
            self.clock.advance(0.02)
        self.assertLessEqual(len(self.diff.writes), 1)
        self.assertEqual(len(self.clock.live), 1)

        self.clock.advance(0.05)
        self.assertEqual(self.diff.writes, [(90, True)])

    def test_echo_of_own_write_is_ignored(self) -> None:
        self.source.scroll_top = 200
        self.sync.on_source_scroll()
        self.clock.advance(0.05)

        # the diff pane reports the scroll we just caused
        self.sync.on_diff_scroll()
        self.clock.advance(0.05)
        self.assertEqual(self.source.writes, [])
        self.assertFalse(self.sync.is_pending(DIFF))

    def test_user_scroll_after_echo_still_syncs(self) -> None:
        self.source.scroll_top = 200
        self.sync.on_source_scroll()
        self.clock.advance(0.05)
        self.sync.on_diff_scroll()

        self.diff.scroll_top = 260
        self.sync.on_diff_scroll()
        self.clock.advance(0.05)
        self.assertEqual(self.source.writes, [(260, True)])

    def test_cancel_drops_pending_writes(self) -> None:
        self.source.scroll_top = 50
        self.sync.on_source_scroll()
        self.sync.cancel()
        self.clock.advance(1)
        self.assertEqual(self.diff.writes, [])


class TestThreadingScheduler(unittest.TestCase):
    def test_real_timer_delivers_latest_offset(self) -> None:
        source, diff = FakePane(), FakePane()
        done = threading.Event()
        original = diff.scroll_to

        def scroll_to(top, smooth=True):
            original(top, smooth)
            if top == 30:
                done.set()

        diff.scroll_to = scroll_to
        sync = ScrollSynchronizer(source, diff, delay_ms=10, scheduler=ThreadingScheduler())
        for top in (10, 20, 30):
            source.scroll_top = top
            sync.on_source_scroll()

        self.assertTrue(done.wait(2))
        sync.cancel()
        self.assertEqual(diff.writes[-1], (30, True))


if __name__ == "__main__":
    unittest.main()
