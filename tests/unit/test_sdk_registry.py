"""Tests for plugin registration, lookup and teardown."""
import asyncio

import httpx
import pytest

from kieai import DependencySpec, KieAI, Plugin, PluginContext
from kieai.config import SDKConfig
from kieai.plugins.base import require_api_key
from kieai.utils.exceptions import (
    ConfigInvalidError,
    DependencyMissingError,
    PluginDuplicateError,
    PluginNotRegisteredError,
    UnknownError,
    ValidationError,
)


class _Api:
    def __init__(self, label):
        self.label = label


def _plugin(name, label=None, **kwargs):
    return Plugin(name=name, factory=lambda ctx: _Api(label or name), **kwargs)


@pytest.fixture
def sdk(config, transport):
    # registration never opens the HTTP client, so nothing to close
    return KieAI(config, transport=transport)


class TestRegistration:
    def test_use_and_get(self, sdk):
        assert sdk.use(_plugin("a")) is sdk
        assert sdk.get("a").label == "a"
        assert sdk.has("a")
        assert sdk.registered_plugins() == ["a"]

    def test_use_many_keeps_order(self, sdk):
        sdk.use_many([_plugin("b"), _plugin("a")])
        assert sdk.registered_plugins() == ["b", "a"]

    def test_duplicate_rejected_first_kept(self, sdk):
        sdk.use(_plugin("a", label="first"))
        with pytest.raises(PluginDuplicateError):
            sdk.use(_plugin("a", label="second"))
        assert sdk.get("a").label == "first"

    def test_get_unregistered(self, sdk):
        with pytest.raises(PluginNotRegisteredError) as exc_info:
            sdk.get("missing")
        assert exc_info.value.plugin_name == "missing"

    def test_get_returns_none_api(self, sdk):
        sdk.use(Plugin(name="side-effect-only", factory=lambda ctx: None))
        assert sdk.has("side-effect-only")
        assert sdk.get("side-effect-only") is None

    def test_required_dependency_gates_registration(self, sdk):
        dependent = _plugin("b", dependencies=[DependencySpec(name="a")])
        with pytest.raises(DependencyMissingError) as exc_info:
            sdk.use(dependent)
        assert exc_info.value.dependency == "a"
        assert not sdk.has("b")

        sdk.use(_plugin("a")).use(dependent)
        assert sdk.registered_plugins() == ["a", "b"]

    def test_optional_dependency_skipped(self, sdk):
        sdk.use(_plugin("b", dependencies=[DependencySpec(name="a", optional=True)]))
        assert sdk.has("b")

    def test_version_constraint_recorded_only(self, sdk):
        sdk.use(_plugin("a"))
        sdk.use(_plugin("b", dependencies=[DependencySpec(name="a", version="^9.0.0")]))
        assert sdk.has("b")

    def test_context_shares_client_and_config(self, sdk):
        seen = {}

        def factory(ctx: PluginContext):
            seen["ctx"] = ctx
            return _Api("a")

        sdk.use(Plugin(name="a", factory=factory))
        assert seen["ctx"].config is sdk.config
        assert seen["ctx"].client is sdk.client
        assert seen["ctx"].registry is sdk.registry

    def test_metadata_lookup(self, sdk):
        plugin = _plugin("a")
        sdk.use(plugin)
        assert sdk.plugin_metadata("a") is plugin
        assert sdk.plugin_metadata("b") is None


class TestInitialization:
    def test_on_init_runs_before_factory(self, sdk):
        calls = []
        sdk.use(
            Plugin(
                name="a",
                on_init=lambda ctx: calls.append("init"),
                factory=lambda ctx: calls.append("factory") or _Api("a"),
            )
        )
        assert calls == ["init", "factory"]

    def test_async_on_init_rejected(self, sdk):
        async def on_init(ctx):
            return None

        with pytest.raises(ValidationError, match="Async initialization is not supported"):
            sdk.use(_plugin("a", on_init=on_init))
        assert not sdk.has("a")

        sdk.use(_plugin("a"))
        assert sdk.get("a").label == "a"

    def test_failing_factory_leaves_no_trace(self, sdk):
        def factory(ctx):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            sdk.use(Plugin(name="a", factory=factory))
        assert not sdk.has("a")
        assert sdk.registered_plugins() == []

        sdk.use(_plugin("a"))
        assert sdk.has("a")

    def test_require_api_key_hook(self, config):
        ctx = PluginContext.model_construct(
            config=SDKConfig.model_construct(api_key="", base_url=config.base_url),
            client=None,
            registry=None,
        )
        with pytest.raises(ConfigInvalidError, match="Demo plugin requires API key"):
            require_api_key("Demo")(ctx)

    def test_invalid_config_rejected(self):
        with pytest.raises(ConfigInvalidError):
            KieAI({"api_key": ""})


class TestDispose:
    @pytest.mark.asyncio
    async def test_runs_sync_and_async_teardowns(self, config):
        sdk = KieAI(config, transport=httpx.MockTransport(lambda request: httpx.Response(200)))
        disposed = []

        async def async_teardown():
            await asyncio.sleep(0)
            disposed.append("b")

        sdk.use(_plugin("a", on_dispose=lambda: disposed.append("a")))
        sdk.use(_plugin("b", on_dispose=async_teardown))
        sdk.use(_plugin("c"))

        await sdk.dispose()

        assert sorted(disposed) == ["a", "b"]
        assert sdk.registered_plugins() == []
        with pytest.raises(PluginNotRegisteredError):
            sdk.get("a")

    @pytest.mark.asyncio
    async def test_context_manager_disposes(self, config):
        disposed = []
        async with KieAI(config) as sdk:
            sdk.use(_plugin("a", on_dispose=lambda: disposed.append("a")))
        assert disposed == ["a"]
        assert not sdk.has("a")

    @pytest.mark.asyncio
    async def test_failing_teardown_does_not_skip_others(self, config):
        sdk = KieAI(config, transport=httpx.MockTransport(lambda request: httpx.Response(200)))
        disposed = []

        async def async_teardown():
            await asyncio.sleep(0)
            disposed.append("a")

        def broken_teardown():
            raise RuntimeError("boom")

        sdk.use(_plugin("a", on_dispose=async_teardown))
        sdk.use(_plugin("b", on_dispose=broken_teardown))
        sdk.use(_plugin("c", on_dispose=lambda: disposed.append("c")))
        sdk.client._get_client()

        with pytest.raises(UnknownError) as exc_info:
            await sdk.dispose()

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert exc_info.value.context["plugin_name"] == "b"
        assert sorted(disposed) == ["a", "c"]
        assert sdk.registered_plugins() == []
        assert sdk.client._client is None

    @pytest.mark.asyncio
    async def test_rejected_async_teardown_still_closes_client(self, config):
        sdk = KieAI(config, transport=httpx.MockTransport(lambda request: httpx.Response(200)))
        disposed = []

        async def rejected():
            raise PluginNotRegisteredError("upstream")

        sdk.use(_plugin("a", on_dispose=rejected))
        sdk.use(_plugin("b", on_dispose=lambda: disposed.append("b")))
        sdk.client._get_client()

        with pytest.raises(PluginNotRegisteredError):
            await sdk.dispose()

        assert disposed == ["b"]
        assert not sdk.has("a")
        assert sdk.client._client is None
