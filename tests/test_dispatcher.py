"""
Tests for HydrationDispatcher.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from lazy_hydrate.config import load_config
from lazy_hydrate.config.options import HydrationOptions, LazyHydrateConfig, SessionOptions
from lazy_hydrate.dispatcher import HydrationDispatcher, hydrate_document
from lazy_hydrate.dom.document import Document
from lazy_hydrate.errors import MalformedResourceUrl, ResourceLoadFailed
from lazy_hydrate.events.bus import AsyncEventEmitter, EventType, get_event_bus
from lazy_hydrate.models import HydrationState, Rect
from lazy_hydrate.session import Session
from lazy_hydrate.triggers import ManualIdleSource

BASE = "https://example.com/"

PAGE = """
<html><head></head><body>
  <div id="hero" class="idle" data-srcset="hero.html,hero.js"></div>
  <div id="both" class="lazy click" data-srcset="both.js"></div>
  <div id="empty" class="idle"></div>
  <div id="broken" class="idle" data-srcset="good.js,broken"></div>
  <div id="plain" data-srcset="plain.js"></div>
</body></html>
"""


@pytest.fixture
def page():
    return Document.from_html(PAGE, url=BASE, viewport=Rect(0, 0, 800, 600))


@pytest.fixture
def idle():
    return ManualIdleSource()


def by_id(document, ident):
    return document.query_all(f"#{ident}")[0]


async def settle():
    for _ in range(5):
        await asyncio.sleep(0)


class TestScan:
    """Tests for finding and arming candidate elements."""

    @pytest.mark.asyncio
    async def test_scan_finds_marked_elements(self, page, fake_session, idle):
        """Test that only elements with a marker class are armed."""
        dispatcher = HydrationDispatcher(page, session=fake_session, idle_source=idle)
        records = dispatcher.scan()

        ids = [r.element.get("id") for r in records]
        assert ids == ["hero", "both", "empty", "broken"]
        assert all(r.state == HydrationState.ARMED for r in records)
        assert dispatcher.record_for(by_id(page, "plain")) is None

    @pytest.mark.asyncio
    async def test_scan_is_idempotent(self, page, fake_session, idle):
        """Test that scanning twice does not re-arm elements."""
        dispatcher = HydrationDispatcher(page, session=fake_session, idle_source=idle)
        dispatcher.scan()
        assert dispatcher.scan() == []
        assert idle.requests == 1

    @pytest.mark.asyncio
    async def test_markers_in_class_order(self, page, idle):
        """Test that markers are reported in class-attribute order."""
        dispatcher = HydrationDispatcher(page, idle_source=idle)
        assert dispatcher.markers_of(by_id(page, "both")) == ["lazy", "click"]

    @pytest.mark.asyncio
    async def test_custom_markers(self, fake_session, idle):
        """Test that configured markers select the gates."""
        document = Document.from_html(
            '<div id="x" class="on-idle" data-res="x.js"></div>', url=BASE
        )
        options = HydrationOptions(
            idle_marker="on-idle",
            manifest_attribute="data-res",
        )
        dispatcher = HydrationDispatcher(
            document, session=fake_session, options=options, idle_source=idle
        )
        assert len(dispatcher.scan()) == 1

        idle.fire()
        records = await dispatcher.wait()
        assert records[0].state == HydrationState.DONE
        assert fake_session.urls == [BASE + "x.js"]


class TestHydration:
    """Tests for the hydration lifecycle."""

    @pytest.mark.asyncio
    async def test_idle_component_loads(self, page, fake_session, idle):
        """Test that an idle element loads after the idle signal."""
        fake_session.bodies[BASE + "hero.html"] = "<h1>Hero</h1>"
        dispatcher = HydrationDispatcher(page, session=fake_session, idle_source=idle)
        dispatcher.scan()
        hero = by_id(page, "hero")

        await settle()
        assert fake_session.calls == []

        idle.fire()
        state = await dispatcher.hydrate(hero)

        assert state == HydrationState.DONE
        assert hero.css_first("h1").text == "Hero"
        assert page.head.css_first("script").get("src") == BASE + "hero.js"
        assert dispatcher.record_for(hero).elapsed_ms is not None

    @pytest.mark.asyncio
    async def test_all_gates_must_fire(self, page, fake_session, idle):
        """Test that a multi-marker element waits for every gate."""
        dispatcher = HydrationDispatcher(page, session=fake_session, idle_source=idle)
        dispatcher.scan()
        both = by_id(page, "both")
        record = dispatcher.record_for(both)

        await page.dispatch_event(both, "click")
        await settle()
        assert record.state == HydrationState.ARMED
        assert fake_session.calls == []

        page.set_bounding_box(both, Rect(0, 100, 100, 100))
        assert await dispatcher.hydrate(both) == HydrationState.DONE
        assert fake_session.urls == [BASE + "both.js"]

    @pytest.mark.asyncio
    async def test_visibility_before_click(self, page, fake_session, idle):
        """Test that gate order does not matter."""
        dispatcher = HydrationDispatcher(page, session=fake_session, idle_source=idle)
        dispatcher.scan()
        both = by_id(page, "both")

        page.set_bounding_box(both, Rect(0, 100, 100, 100))
        await settle()
        assert dispatcher.record_for(both).state == HydrationState.ARMED

        await page.dispatch_event(both, "click")
        assert await dispatcher.hydrate(both) == HydrationState.DONE

    @pytest.mark.asyncio
    async def test_missing_manifest_is_skipped(self, page, fake_session, idle):
        """Test that a triggered element without manifest does nothing."""
        dispatcher = HydrationDispatcher(page, session=fake_session, idle_source=idle)
        dispatcher.scan()
        idle.fire()

        assert await dispatcher.hydrate(by_id(page, "empty")) == HydrationState.SKIPPED

    @pytest.mark.asyncio
    async def test_malformed_manifest_fails_before_fetching(
        self, page, fake_session, idle
    ):
        """Test that a malformed URL aborts the component up front."""
        dispatcher = HydrationDispatcher(page, session=fake_session, idle_source=idle)
        dispatcher.scan()
        idle.fire()
        broken = by_id(page, "broken")

        with pytest.raises(MalformedResourceUrl):
            await dispatcher.hydrate(broken)

        record = dispatcher.record_for(broken)
        assert record.state == HydrationState.FAILED
        assert isinstance(record.error, MalformedResourceUrl)
        assert BASE + "good.js" not in fake_session.urls

    @pytest.mark.asyncio
    async def test_failure_is_isolated(self, page, fake_session, idle):
        """Test that one failing component does not affect siblings."""
        fake_session.statuses[BASE + "hero.html"] = 500
        dispatcher = HydrationDispatcher(page, session=fake_session, idle_source=idle)
        dispatcher.scan()
        idle.fire()

        await asyncio.gather(
            *(dispatcher.hydrate(by_id(page, i)) for i in ("hero", "empty", "broken")),
            return_exceptions=True,
        )
        states = {r.element.get("id"): r.state for r in dispatcher.records}

        assert states["hero"] == HydrationState.FAILED
        assert states["broken"] == HydrationState.FAILED
        assert states["empty"] == HydrationState.SKIPPED
        assert states["both"] == HydrationState.ARMED
        assert isinstance(dispatcher.record_for(by_id(page, "hero")).error, ResourceLoadFailed)
        assert page.head.css_first("script") is None

    @pytest.mark.asyncio
    async def test_hydrate_unscanned_element(self, page, fake_session, idle):
        """Test that hydrate arms an element the scan did not see."""
        dispatcher = HydrationDispatcher(page, session=fake_session, idle_source=idle)
        extra = page.create_element("div", {"class": "idle", "data-srcset": "x.js"})
        page.append_child(page.body, extra)

        wait = asyncio.ensure_future(dispatcher.hydrate(extra))
        await settle()
        idle.fire()
        assert await wait == HydrationState.DONE

    @pytest.mark.asyncio
    async def test_relative_urls_use_base_option(self, page, fake_session, idle):
        """Test that base_url overrides the document URL."""
        options = HydrationOptions(base_url="https://cdn.example.com/assets/")
        dispatcher = HydrationDispatcher(
            page, session=fake_session, options=options, idle_source=idle
        )
        dispatcher.scan()
        idle.fire()
        await dispatcher.hydrate(by_id(page, "hero"))
        assert "https://cdn.example.com/assets/hero.js" in fake_session.urls


class TestLifecycleEvents:
    """Tests for events published during hydration."""

    @pytest.mark.asyncio
    async def test_events_on_private_bus(self, page, fake_session, idle):
        """Test the event sequence of a successful component."""
        bus = AsyncEventEmitter()
        seen = []
        for event_type in (
            EventType.GATE_ARMED,
            EventType.GATE_FIRED,
            EventType.HYDRATION_STARTED,
            EventType.RESOURCE_FETCHED,
            EventType.RESOURCE_EXECUTED,
            EventType.HYDRATION_COMPLETE,
        ):
            bus.on(
                event_type,
                lambda e: seen.append(e.type),
                filter=lambda e: e.target is not None and e.target.get("id") == "hero",
            )

        dispatcher = HydrationDispatcher(
            page, session=fake_session, idle_source=idle, bus=bus
        )
        dispatcher.scan()
        idle.fire()
        await dispatcher.hydrate(by_id(page, "hero"))

        assert seen[0] == EventType.GATE_ARMED
        assert seen[1] == EventType.GATE_FIRED
        assert seen[2] == EventType.HYDRATION_STARTED
        assert seen.count(EventType.RESOURCE_FETCHED) == 2
        assert seen[-2] == EventType.RESOURCE_EXECUTED
        assert seen[-1] == EventType.HYDRATION_COMPLETE

    @pytest.mark.asyncio
    async def test_failure_and_skip_on_global_bus(self, page, fake_session, idle):
        """Test that failures and skips reach the global bus by default."""
        bus = get_event_bus()
        failed, skipped = [], []
        bus.on(EventType.HYDRATION_FAILED, failed.append)
        bus.on(EventType.HYDRATION_SKIPPED, skipped.append)

        dispatcher = HydrationDispatcher(page, session=fake_session, idle_source=idle)
        dispatcher.scan()
        idle.fire()
        for ident in ("hero", "empty", "broken"):
            try:
                await dispatcher.hydrate(by_id(page, ident))
            except MalformedResourceUrl:
                pass

        assert [e.target.get("id") for e in failed] == ["broken"]
        assert failed[0].data["manifest"] == "good.js,broken"
        assert [e.target.get("id") for e in skipped] == ["empty"]


class TestHydrateDocument:
    """Tests for the hydrate_document helper."""

    @pytest.mark.asyncio
    async def test_arms_everything(self, page, fake_session, idle):
        """Test that the helper returns a scanned dispatcher."""
        dispatcher = await hydrate_document(page, session=fake_session, idle_source=idle)
        assert len(dispatcher.records) == 4
        assert idle.requests == 1

    @pytest.mark.asyncio
    async def test_config_from_environment(self, fake_session, idle, monkeypatch):
        """Test that an environment-configured marker arms its gate."""
        monkeypatch.setenv("LAZY_HYDRATE_IDLE_MARKER", "when-idle")
        document = Document.from_html(
            '<html><body><div id="w" class="when-idle idle" data-srcset="w.js"></div></body></html>',
            url=BASE,
        )
        config = load_config()
        dispatcher = await hydrate_document(
            document, session=fake_session, config=config, idle_source=idle
        )
        w = by_id(document, "w")

        assert dispatcher.options.idle_marker == "when-idle"
        assert dispatcher.markers_of(w) == ["when-idle"]
        idle.fire()
        assert await dispatcher.hydrate(w) == HydrationState.DONE
        assert fake_session.urls == [BASE + "w.js"]


CONFIGURED_PAGE = """
<html><body>
  <div id="panel" class="in-view" data-res="panel.js" data-srcset="ignored.js"></div>
</body></html>
"""


class TestConfiguredDispatcher:
    """Tests for building a dispatcher from loaded configuration."""

    @pytest.mark.asyncio
    async def test_yaml_config_applies_options(self, tmp_path, fake_session, idle):
        """Test that a YAML marker, manifest attribute and margin take effect."""
        path = tmp_path / "lazy-hydrate.config.yaml"
        path.write_text(
            "hydration:\n"
            "  visibility_marker: in-view\n"
            "  manifest_attribute: data-res\n"
            "  root_margin: 0\n"
        )
        page = Document.from_html(CONFIGURED_PAGE, url=BASE, viewport=Rect(0, 0, 800, 600))
        config = load_config(path, load_env=False)
        dispatcher = HydrationDispatcher(
            page, session=fake_session, config=config, idle_source=idle
        )
        panel = by_id(page, "panel")

        [record] = dispatcher.scan()
        assert record.markers == ["in-view"]

        # Within the default 100px margin, but outside a zero margin.
        page.set_bounding_box(panel, Rect(0, 650, 100, 100))
        await settle()
        assert record.state == HydrationState.ARMED

        page.scroll_to(0, 200)
        assert await dispatcher.hydrate(panel) == HydrationState.DONE
        assert fake_session.urls == [BASE + "panel.js"]

    @pytest.mark.asyncio
    async def test_explicit_options_beat_config(self, page, fake_session, idle):
        """Test that options passed directly are used over config.hydration."""
        config = LazyHydrateConfig(hydration=HydrationOptions(idle_marker="later"))
        dispatcher = HydrationDispatcher(
            page,
            session=fake_session,
            options=HydrationOptions(root_margin=5),
            config=config,
            idle_source=idle,
        )
        assert dispatcher.options.idle_marker == "idle"
        assert dispatcher.options.root_margin == 5

    @pytest.mark.asyncio
    async def test_builds_session_from_config(self, page, idle):
        """Test that a session is built from config.session when none is given."""
        config = LazyHydrateConfig(
            session=SessionOptions(headers={"X-Client": "docs"}, impersonate="safari17_0")
        )
        dispatcher = HydrationDispatcher.from_config(page, config, idle_source=idle)

        assert isinstance(dispatcher.session, Session)
        assert dispatcher.session.headers == {"X-Client": "docs"}
        with patch.object(Session, "close", new_callable=AsyncMock) as close:
            await dispatcher.close()
        close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_given_session_is_not_closed(self, page, idle):
        """Test that close() leaves a caller-owned session open."""
        session = MagicMock()
        session.close = AsyncMock()
        dispatcher = HydrationDispatcher(
            page, session=session, config=LazyHydrateConfig(), idle_source=idle
        )
        await dispatcher.close()
        session.close.assert_not_awaited()


class TestClose:
    """Tests for releasing document listeners."""

    @pytest.mark.asyncio
    async def test_close_detaches_observer(self, page, fake_session, idle):
        """Test that close() removes scroll, resize and layout listeners."""
        dispatcher = HydrationDispatcher(page, session=fake_session, idle_source=idle)
        dispatcher.scan()
        for event in (EventType.SCROLL, EventType.RESIZE, EventType.LAYOUT):
            assert page.events.listener_count(event) == 1

        await dispatcher.close()
        await dispatcher.close()

        for event in (EventType.SCROLL, EventType.RESIZE, EventType.LAYOUT):
            assert page.events.listener_count(event) == 0

    @pytest.mark.asyncio
    async def test_visibility_stops_after_close(self, page, fake_session, idle):
        """Test that a closed dispatcher no longer reacts to layout."""
        async with HydrationDispatcher(
            page, session=fake_session, idle_source=idle
        ) as dispatcher:
            dispatcher.scan()
            both = by_id(page, "both")
            await page.dispatch_event(both, "click")

        page.set_bounding_box(both, Rect(0, 100, 100, 100))
        await settle()
        assert dispatcher.record_for(both).state == HydrationState.ARMED
        assert fake_session.calls == []
