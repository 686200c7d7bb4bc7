"""Tests for the CartDispatcher detection flow."""

import asyncio
import json

import pytest

from cartwatch_core.config import Settings
from cartwatch_core.dispatcher import (
    DUPLICATE_MESSAGE,
    CartDispatcher,
    DetectionStatus,
    success_message,
)
from cartwatch_core.error_handler import DEFAULT_FAILURE_MESSAGE
from cartwatch_core.exceptions import StorageError
from cartwatch_core.storage import JsonCartStore, MemoryCartStore

QUIET = Settings(auto_detect=True, show_confirmation=False, sync_enabled=False)


class ForgetfulStore(MemoryCartStore):
    """Stores records but never reports them as recent."""

    async def get_recent(self):
        return []


class BrokenAppendStore(MemoryCartStore):
    async def append(self, record):
        raise StorageError("disk full")


class BrokenReadStore(MemoryCartStore):
    async def get_recent(self):
        raise StorageError("cannot read")


class Recorder:
    def __init__(self, result=None, exc=None):
        self.calls = []
        self.result = result
        self.exc = exc

    def __call__(self, *args):
        self.calls.append(args)
        if self.exc:
            raise self.exc
        return self.result


def _dispatcher(doc, store=None, settings=QUIET, **kwargs):
    return CartDispatcher(
        store=store if store is not None else MemoryCartStore(),
        document=doc,
        settings=settings,
        release_delay=0,
        **kwargs,
    )


def test_success_message():
    assert success_message("Wireless Mouse") == 'Added "Wireless Mouse" to cart!'
    assert success_message("A" * 40) == f'Added "{"A" * 30}..." to cart!'


class TestHandleClick:

    @pytest.mark.asyncio
    async def test_added(self, mouse_doc):
        store = MemoryCartStore()
        notify = Recorder()
        dispatcher = _dispatcher(mouse_doc, store, notify=notify)

        result = await dispatcher.handle_click(mouse_doc.select_one(".add-to-cart"))

        assert result.status == DetectionStatus.ADDED
        assert result.added
        assert result.record.title == "Wireless Mouse"
        assert result.record.price == "29.99"
        assert result.record.quantity == 1
        assert [r.title for r in store.items] == ["Wireless Mouse"]
        assert notify.calls == [('Added "Wireless Mouse" to cart!', "success")]
        assert not dispatcher.guard.held

    @pytest.mark.asyncio
    async def test_click_on_child_of_button(self, make_doc):
        doc = make_doc("""
            <div class="product-item">
              <h3 class="product-name">Noise Cancelling Headphones</h3>
              <span class="price">$199.00</span>
              <button class="btn-primary"><span class="label">Add to cart</span></button>
            </div>
        """)
        result = await _dispatcher(doc).handle_click(doc.select_one(".label"))
        assert result.status == DetectionStatus.ADDED
        assert result.record.price == "$199.00"

    @pytest.mark.asyncio
    async def test_not_action(self, make_doc):
        doc = make_doc('<div class="banner"><p class="info">Free shipping over $50</p></div>')
        result = await _dispatcher(doc).handle_click(doc.select_one(".info"))
        assert result.status == DetectionStatus.NOT_ACTION

    @pytest.mark.asyncio
    async def test_disabled(self, mouse_doc):
        store = MemoryCartStore()
        dispatcher = _dispatcher(mouse_doc, store, settings=Settings(auto_detect=False))
        result = await dispatcher.handle_click(mouse_doc.select_one(".add-to-cart"))
        assert result.status == DetectionStatus.DISABLED
        assert store.items == []

    @pytest.mark.asyncio
    async def test_invalid_without_title(self, make_doc):
        doc = make_doc('<div><button class="add-to-cart">Add to cart</button></div>')
        store = MemoryCartStore()
        result = await _dispatcher(doc, store).handle_click(doc.select_one("button"))
        assert result.status == DetectionStatus.INVALID
        assert store.items == []

    @pytest.mark.asyncio
    async def test_busy_while_guard_held(self, mouse_doc):
        dispatcher = _dispatcher(mouse_doc)
        dispatcher.guard.try_acquire()
        result = await dispatcher.handle_click(mouse_doc.select_one(".add-to-cart"))
        assert result.status == DetectionStatus.BUSY

    @pytest.mark.asyncio
    async def test_no_document(self, mouse_doc):
        dispatcher = CartDispatcher(store=MemoryCartStore(), settings=QUIET, release_delay=0)
        with pytest.raises(ValueError):
            await dispatcher.handle_action(mouse_doc.select_one(".add-to-cart"))


class TestDeduplication:

    @pytest.mark.asyncio
    async def test_second_click_is_duplicate(self, mouse_doc):
        store = MemoryCartStore()
        notify = Recorder()
        dispatcher = _dispatcher(mouse_doc, store, notify=notify)
        button = mouse_doc.select_one(".add-to-cart")

        first = await dispatcher.handle_click(button)
        second = await dispatcher.handle_click(button)

        assert first.status == DetectionStatus.ADDED
        assert second.status == DetectionStatus.DUPLICATE
        assert second.message == DUPLICATE_MESSAGE
        assert notify.calls[-1] == (DUPLICATE_MESSAGE, "info")
        assert len(store.items) == 1

    @pytest.mark.asyncio
    async def test_rapid_repeat_is_debounced(self, mouse_doc):
        dispatcher = _dispatcher(mouse_doc, ForgetfulStore())
        button = mouse_doc.select_one(".add-to-cart")

        first = await dispatcher.handle_click(button)
        second = await dispatcher.handle_click(button)

        assert first.status == DetectionStatus.ADDED
        assert second.status == DetectionStatus.DEBOUNCED

    @pytest.mark.asyncio
    async def test_duplicate_check_failure_is_not_duplicate(self, mouse_doc):
        result = await _dispatcher(mouse_doc, BrokenReadStore()).handle_click(mouse_doc.select_one(".add-to-cart"))
        assert result.status == DetectionStatus.ADDED


class TestCollaborators:

    @pytest.mark.asyncio
    async def test_confirmation_declined(self, mouse_doc):
        store = MemoryCartStore()
        confirm = Recorder(result=False)
        settings = Settings(show_confirmation=True)
        dispatcher = _dispatcher(mouse_doc, store, settings=settings, confirm=confirm)

        result = await dispatcher.handle_click(mouse_doc.select_one(".add-to-cart"))

        assert result.status == DetectionStatus.CANCELLED
        assert confirm.calls[0][0].title == "Wireless Mouse"
        assert store.items == []

    @pytest.mark.asyncio
    async def test_async_confirmation_accepted(self, mouse_doc):
        async def confirm(record):
            return True

        dispatcher = _dispatcher(mouse_doc, settings=Settings(show_confirmation=True), confirm=confirm)
        result = await dispatcher.handle_click(mouse_doc.select_one(".add-to-cart"))
        assert result.status == DetectionStatus.ADDED

    @pytest.mark.asyncio
    async def test_failing_confirmation_cancels(self, mouse_doc):
        confirm = Recorder(exc=RuntimeError("dialog closed"))
        dispatcher = _dispatcher(mouse_doc, settings=Settings(show_confirmation=True), confirm=confirm)
        result = await dispatcher.handle_click(mouse_doc.select_one(".add-to-cart"))
        assert result.status == DetectionStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_confirmation_skipped_when_disabled(self, mouse_doc):
        confirm = Recorder(result=False)
        result = await _dispatcher(mouse_doc, confirm=confirm).handle_click(mouse_doc.select_one(".add-to-cart"))
        assert result.status == DetectionStatus.ADDED
        assert confirm.calls == []

    @pytest.mark.asyncio
    async def test_store_failure(self, mouse_doc):
        notify = Recorder()
        dispatcher = _dispatcher(mouse_doc, BrokenAppendStore(), notify=notify)

        result = await dispatcher.handle_click(mouse_doc.select_one(".add-to-cart"))

        assert result.status == DetectionStatus.FAILED
        assert result.message == DEFAULT_FAILURE_MESSAGE
        assert notify.calls == [(DEFAULT_FAILURE_MESSAGE, "error")]
        assert not dispatcher.guard.held

    @pytest.mark.asyncio
    async def test_failing_notify_is_swallowed(self, mouse_doc):
        notify = Recorder(exc=RuntimeError("toast failed"))
        result = await _dispatcher(mouse_doc, notify=notify).handle_click(mouse_doc.select_one(".add-to-cart"))
        assert result.status == DetectionStatus.ADDED

    @pytest.mark.asyncio
    async def test_sync_called_when_enabled(self, mouse_doc):
        sync = Recorder()
        settings = Settings(show_confirmation=False, sync_enabled=True, api_endpoint="https://api.example/cart")
        result = await _dispatcher(mouse_doc, settings=settings, sync=sync).handle_click(mouse_doc.select_one(".add-to-cart"))
        assert result.status == DetectionStatus.ADDED
        record, endpoint = sync.calls[0]
        assert record.title == "Wireless Mouse"
        assert endpoint == "https://api.example/cart"

    @pytest.mark.asyncio
    async def test_async_sync_failure_is_logged(self, mouse_doc):
        async def sync(record, endpoint):
            raise ConnectionError("offline")

        settings = Settings(show_confirmation=False, sync_enabled=True, api_endpoint="https://api.example/cart")
        result = await _dispatcher(mouse_doc, settings=settings, sync=sync).handle_click(mouse_doc.select_one(".add-to-cart"))
        await asyncio.sleep(0)
        assert result.status == DetectionStatus.ADDED

    @pytest.mark.asyncio
    async def test_sync_skipped_without_endpoint(self, mouse_doc):
        sync = Recorder()
        settings = Settings(show_confirmation=False, sync_enabled=True, api_endpoint="")
        await _dispatcher(mouse_doc, settings=settings, sync=sync).handle_click(mouse_doc.select_one(".add-to-cart"))
        assert sync.calls == []


class TestRetries:

    @pytest.mark.asyncio
    async def test_retry_after_cancel_prompts_again(self, mouse_doc):
        answers = iter([False, True])
        confirm_calls = []

        def confirm(record):
            confirm_calls.append(record.title)
            return next(answers)

        store = MemoryCartStore()
        dispatcher = _dispatcher(mouse_doc, store, settings=Settings(show_confirmation=True), confirm=confirm)
        button = mouse_doc.select_one(".add-to-cart")

        first = await dispatcher.handle_click(button)
        second = await dispatcher.handle_click(button)

        assert first.status == DetectionStatus.CANCELLED
        assert second.status == DetectionStatus.ADDED
        assert len(confirm_calls) == 2
        assert len(store.items) == 1

    @pytest.mark.asyncio
    async def test_retry_after_store_failure(self, mouse_doc):
        class FlakyStore(MemoryCartStore):
            def __init__(self):
                super().__init__()
                self.failures = 1

            async def append(self, record):
                if self.failures:
                    self.failures -= 1
                    raise StorageError("disk full")
                await super().append(record)

        store = FlakyStore()
        dispatcher = _dispatcher(mouse_doc, store)
        button = mouse_doc.select_one(".add-to-cart")

        first = await dispatcher.handle_click(button)
        second = await dispatcher.handle_click(button)

        assert first.status == DetectionStatus.FAILED
        assert second.status == DetectionStatus.ADDED
        assert len(store.items) == 1


class TestStoredForm:

    @pytest.mark.asyncio
    async def test_long_title_variant_is_duplicate(self, make_doc):
        title = "Shirt " + "A" * 243
        html = f"""
            <div class="product">
              <h1>{title}</h1>
              <span class="price">$20.00</span>
              <button class="add-to-cart">Add to cart</button>
            </div>
        """
        red = make_doc(html, url="https://shop.example/p/shirt?color=red")
        blue = make_doc(html, url="https://shop.example/p/shirt?color=blue")
        store = MemoryCartStore()
        dispatcher = _dispatcher(None, store)

        first = await dispatcher.handle_click(red.select_one("button"), red)
        second = await dispatcher.handle_click(blue.select_one("button"), blue)

        assert len(title) == 249
        assert first.status == DetectionStatus.ADDED
        assert len(first.record.title) == 200
        assert second.status == DetectionStatus.DUPLICATE
        assert len(store.items) == 1

    @pytest.mark.asyncio
    async def test_bad_stored_timestamp_does_not_block_detection(self, mouse_doc, tmp_path):
        cart_file = tmp_path / "cart.json"
        cart_file.write_text(json.dumps([
            {"title": "Old Lamp", "url": "https://shop.example/lamp", "timestamp": "yesterday"},
        ]), encoding="utf-8")
        store = JsonCartStore(cart_file)

        result = await _dispatcher(mouse_doc, store).handle_click(mouse_doc.select_one(".add-to-cart"))

        assert result.status == DetectionStatus.ADDED
        assert [item.title for item in store.load()] == ["Wireless Mouse", "Old Lamp"]


class TestPendingCollaborators:

    @pytest.mark.asyncio
    async def test_async_collaborator_kept_until_done(self, mouse_doc):
        from cartwatch_core import dispatcher as dispatcher_module

        release = asyncio.Event()

        async def sync(record, endpoint):
            await release.wait()

        settings = Settings(show_confirmation=False, sync_enabled=True, api_endpoint="https://api.example/cart")
        before = set(dispatcher_module._pending_tasks)
        await _dispatcher(mouse_doc, settings=settings, sync=sync).handle_click(mouse_doc.select_one(".add-to-cart"))

        scheduled = dispatcher_module._pending_tasks - before
        assert len(scheduled) == 1

        release.set()
        await asyncio.gather(*scheduled)
        await asyncio.sleep(0)
        assert not scheduled & dispatcher_module._pending_tasks


class TestObserverAttachment:

    def test_attach_observer(self, mouse_doc):
        sub = _dispatcher(mouse_doc).attach_observer(lambda n: None)
        assert sub is not None
        assert len(sub.elements) == 1

    def test_no_observer_when_disabled(self, mouse_doc):
        dispatcher = _dispatcher(mouse_doc, settings=Settings(auto_detect=False))
        assert dispatcher.attach_observer(lambda n: None) is None


def test_result_to_dict(mouse_doc):
    result = asyncio.run(_dispatcher(mouse_doc).handle_click(mouse_doc.select_one(".add-to-cart")))
    data = result.to_dict()
    assert data["status"] == "added"
    assert data["record"]["title"] == "Wireless Mouse"
    assert "addedAt" in data["record"]
