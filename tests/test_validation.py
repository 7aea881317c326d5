import unittest

import pytest

from litewire import (
    ClassProvider,
    Container,
    FactoryProvider,
    ProviderNotFoundError,
    ResolutionError,
    Scope,
    Symbol,
    ValueProvider,
    as_provider,
)


class TestProviderValidation(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.cont = Container()

    def test_register_provider_without_token_raises(self):
        with pytest.raises(ResolutionError) as ctx:
            self.cont.register(ValueProvider(None, 1))
        assert "missing token" in str(ctx.value)

    def test_register_provider_with_empty_string_token_raises(self):
        with pytest.raises(ResolutionError):
            self.cont.register(ValueProvider("", 1))

    def test_register_value_provider_with_none_value_raises(self):
        with pytest.raises(ResolutionError) as ctx:
            self.cont.register(ValueProvider("nothing", None))
        assert "missing value" in str(ctx.value)

    def test_register_class_provider_with_non_class_raises(self):
        with pytest.raises(ResolutionError):
            self.cont.register(ClassProvider("svc", object()))

    def test_register_factory_provider_with_non_callable_raises(self):
        with pytest.raises(ResolutionError):
            self.cont.register(FactoryProvider("svc", 42))

    def test_register_unknown_scope_raises(self):
        with pytest.raises(ResolutionError):
            self.cont.register(ValueProvider("x", 1, scope="request"))

    def test_register_non_provider_object_raises(self):
        with pytest.raises(ResolutionError):
            self.cont.register(object())

    def test_invalid_provider_leaves_registry_untouched(self):
        with pytest.raises(ResolutionError):
            self.cont.register(ValueProvider(None, 1))

        with pytest.raises(ProviderNotFoundError):
            self.cont.resolve("x")

    def test_earlier_providers_in_same_call_stay_registered(self):
        with pytest.raises(ResolutionError):
            self.cont.register(ValueProvider("ok", 1), ValueProvider("bad", None))

        assert self.cont.resolve("ok") == 1
        assert "bad" not in self.cont


class TestMappingProviders(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.cont = Container()

    def test_mapping_with_use_class(self):
        class Clock: ...

        self.cont.register({"token": "clock", "use_class": Clock, "scope": Scope.TRANSIENT})

        assert isinstance(self.cont.resolve("clock"), Clock)
        assert self.cont.resolve("clock") is not self.cont.resolve("clock")

    def test_mapping_with_use_value(self):
        self.cont.register({"token": "config", "use_value": {"app_name": "MyApp"}})
        assert self.cont.resolve("config") == {"app_name": "MyApp"}

    def test_mapping_with_use_factory_and_deps(self):
        logger = Symbol("Logger")
        self.cont.register(
            {"token": logger, "use_value": "console"},
            {"token": "greeting", "use_factory": lambda log: f"hello from {log}", "deps": [logger]},
        )
        assert self.cont.resolve("greeting") == "hello from console"

    def test_mapping_is_converted_to_matching_variant(self):
        provider = as_provider({"token": "f", "use_factory": list})
        assert isinstance(provider, FactoryProvider)
        assert provider.deps == ()
        assert provider.effective_scope is Scope.SINGLETON

    def test_mapping_without_token_raises(self):
        with pytest.raises(ResolutionError) as ctx:
            self.cont.register({"use_value": 1})
        assert "missing token" in str(ctx.value)

    def test_mapping_with_none_value_counts_as_no_payload(self):
        with pytest.raises(ResolutionError):
            self.cont.register({"token": "x", "use_value": None})

    def test_mapping_with_two_payloads_raises(self):
        with pytest.raises(ResolutionError) as ctx:
            self.cont.register({"token": "x", "use_value": 1, "use_factory": lambda: 2})
        assert "expected exactly one of" in str(ctx.value)

    def test_mapping_without_payload_raises(self):
        with pytest.raises(ResolutionError):
            self.cont.register({"token": "x"})


class TestDependencyDeclarations(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.cont = Container()

    def test_string_inject_declaration_is_rejected_at_registration(self):
        class Service:
            inject = "config"

            def __init__(self, config):
                self.config = config

        with pytest.raises(ResolutionError) as ctx:
            self.cont.register(ClassProvider(Service, Service))
        assert "Service.inject" in str(ctx.value)

    def test_string_inject_declared_after_registration_fails_on_resolve(self):
        class Service:
            def __init__(self, config):
                self.config = config

        self.cont.register(ValueProvider("config", {}), ClassProvider(Service, Service))
        Service.inject = "config"

        with pytest.raises(ResolutionError, match="Service.inject"):
            self.cont.resolve(Service)

    def test_string_factory_deps_are_rejected(self):
        with pytest.raises(ResolutionError, match="`deps` must be a sequence"):
            self.cont.register(FactoryProvider("url", lambda host: host, deps="host"))

    def test_string_mapping_deps_are_rejected(self):
        with pytest.raises(ResolutionError, match="`deps` must be a sequence"):
            self.cont.register({"token": "url", "use_factory": lambda host: host, "deps": "host"})

    def test_list_mapping_deps_are_accepted(self):
        self.cont.register(
            {"token": "host", "use_value": "localhost"},
            {"token": "url", "use_factory": lambda host: f"http://{host}", "deps": ["host"]},
        )
        assert self.cont.resolve("url") == "http://localhost"
