"""Tests for the cart-count observer."""

import asyncio

import pytest

from cartwatch_core.observer import CartCountObserver, parse_count

COUNTERS = """
<header>
  <span class="cart-count">1</span>
  <div id="mini"><span data-cart-count>1</span></div>
</header>
"""


def _set_text(node, text):
    node.raw.string = text


@pytest.mark.parametrize("text,expected", [
    ("3", 3),
    (" 12 ", 12),
    ("", None),
    ("3 items", None),
    (None, None),
])
def test_parse_count(text, expected):
    assert parse_count(text) == expected


class TestCartCountObserver:

    def test_no_counters_returns_none(self, make_doc):
        doc = make_doc("<div><p>nothing here</p></div>")
        assert CartCountObserver(doc).observe(lambda n: None) is None

    def test_find_counters_deduplicates(self, make_doc):
        doc = make_doc('<span class="cart-count cart-badge" data-cart-count>0</span>')
        assert len(CartCountObserver(doc).find_counters()) == 1

    def test_check_reports_changed_integers(self, make_doc):
        doc = make_doc(COUNTERS)
        seen = []
        sub = CartCountObserver(doc).observe(seen.append)

        assert sub.check() == []
        first, second = sub.elements
        _set_text(first, "2")
        _set_text(second, "many")
        assert sub.check() == [2]
        assert seen == [2]
        assert sub.check() == []

    def test_failing_listener_does_not_stop_observation(self, make_doc):
        doc = make_doc(COUNTERS)
        calls = []

        def listener(count):
            calls.append(count)
            raise ValueError("listener broke")

        sub = CartCountObserver(doc).observe(listener)
        for element in sub.elements:
            _set_text(element, "5")
        assert sub.check() == [5, 5]
        assert calls == [5, 5]

    def test_dispose_stops_reporting(self, make_doc):
        doc = make_doc(COUNTERS)
        seen = []
        with CartCountObserver(doc).observe(seen.append) as sub:
            pass
        assert sub.disposed
        _set_text(sub.elements[0], "9")
        assert sub.check() == []
        sub.dispose()
        assert seen == []

    @pytest.mark.asyncio
    async def test_polling_task(self, make_doc):
        doc = make_doc(COUNTERS)
        seen = []
        sub = CartCountObserver(doc).observe(seen.append)
        task = sub.start(interval=0.01)
        _set_text(sub.elements[0], "4")
        await asyncio.sleep(0.05)
        sub.dispose()
        await asyncio.sleep(0)
        assert seen == [4]
        assert task.cancelled() or task.done()


class TestFeed:

    def test_pushed_texts_report_changes(self):
        from cartwatch_core.observer import CartCountSubscription

        seen = []
        sub = CartCountSubscription([], seen.append)
        assert sub.feed(0, "1") == 1
        assert sub.feed(0, "1") is None
        assert sub.feed(0, " 3 ") == 3
        assert sub.feed("mini", "n/a") is None
        assert seen == [1, 3]

    def test_feed_shares_state_with_check(self, make_doc):
        doc = make_doc(COUNTERS)
        seen = []
        sub = CartCountObserver(doc).observe(seen.append)
        assert sub.feed(0, "1") is None
        assert sub.feed(0, "6") == 6
        _set_text(sub.elements[0], "6")
        assert sub.check() == []
        assert seen == [6]
