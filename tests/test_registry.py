from dataclasses import dataclass
from typing import Annotated, Callable

import pytest

from apiscope.domain import ApiFactory, ApiRef
from apiscope.errors import DependencyError
from apiscope.registry import FactoryRegistration, FactoryRegistry

Greeter = Callable[[str], str]

greeter_ref: ApiRef[Greeter] = ApiRef("greeter")
uppercase_greeter_ref: ApiRef[Greeter] = ApiRef("uppercase-greeter")


@pytest.fixture
def registry():
    return FactoryRegistry()


@pytest.fixture
def factory_finder(registry):
    def find(ref: ApiRef) -> ApiFactory:
        return next(f for f in registry.registered_factories() if f.api == ref)

    return find


@pytest.fixture
def greeter(registry, factory_finder):
    @registry.provides(greeter_ref, profiles=["test1"])
    def make_greeter() -> Greeter:
        def greeter(name: str) -> str:
            return "Hello %s" % name

        return greeter

    return factory_finder(greeter_ref)


@pytest.fixture
def uppercase_greeter(registry, factory_finder):
    @registry.provides(uppercase_greeter_ref, profiles=["test2"])
    def make_uppercase_greeter(greeter: Annotated[Greeter, greeter_ref]) -> Greeter:
        def uppercase_greeter(name: str) -> str:
            return greeter(name).upper()

        return uppercase_greeter

    return factory_finder(uppercase_greeter_ref)


def test_factory_is_registered(registry, greeter: ApiFactory):
    assert registry.registrations() == [FactoryRegistration(greeter, ["test1"])]
    assert greeter.deps == {}
    assert greeter.factory({})("Dominic") == "Hello Dominic"


def test_dependencies_are_read_from_annotated_references(
    greeter, uppercase_greeter: ApiFactory
):
    assert uppercase_greeter.deps == {"greeter": greeter_ref}

    built = uppercase_greeter.factory({"greeter": greeter.factory({})})
    assert built("Dominic") == "HELLO DOMINIC"


def test_dependencies_can_be_identified_by_id(registry):
    @registry.provides(ApiRef("foo"))
    def make_foo(name: Annotated[str, "bar"]) -> str:
        return name

    factory = registry.registered_factories()[0]
    assert factory.deps == {"name": ApiRef("bar")}


def test_explicit_deps_take_precedence_over_annotations(registry):
    @registry.provides(ApiRef("foo"), deps={"name": ApiRef("baz")})
    def make_foo(name: Annotated[str, "bar"]) -> str:
        return name

    assert registry.registered_factories()[0].deps == {"name": ApiRef("baz")}


def test_decorator_returns_target_unchanged(registry):
    def make_foo() -> str:
        return "foo"

    assert registry.provides(ApiRef("foo"))(make_foo) is make_foo


def test_classes_can_be_registered(registry):
    @registry.provides(ApiRef("service"))
    @dataclass(frozen=True)
    class Service:
        greeter: Annotated[Greeter, greeter_ref]

        def greet(self, name):
            return self.greeter(name)

    factory = registry.registered_factories()[0]
    assert factory.deps == {"greeter": greeter_ref}

    service = factory.factory({"greeter": lambda name: f"Hi {name}"})
    assert isinstance(service, Service)
    assert service.greet("Arthur") == "Hi Arthur"


def test_classes_without_parameters_have_no_dependencies(registry):
    @registry.provides(ApiRef("plain"))
    class Plain:
        pass

    assert registry.registered_factories()[0].deps == {}


def test_retrieve_factories_by_profile(registry):
    def register(name, profiles=None):
        registry.register(ApiFactory(ApiRef(name), {}, lambda deps: name), profiles)

    register("globally_defined")
    register("test_only", ["test"])
    register("not_test", ["!test"])
    register("prod_or_uat", ["prod", "uat"])

    def factories_in(*profiles):
        return {f.api.id for f in registry.registered_factories(set(profiles))}

    assert factories_in() == {"globally_defined", "not_test"}
    assert factories_in("test") == {"globally_defined", "test_only"}
    assert factories_in("prod") == {"globally_defined", "not_test", "prod_or_uat"}
    assert factories_in("uat") == {"globally_defined", "not_test", "prod_or_uat"}
    assert factories_in("empty") == {"globally_defined", "not_test"}
    assert len(registry.registered_factories()) == 4


def test_throws_dependency_error_on_unannotated_factory_param(registry):
    with pytest.raises(DependencyError, match="Dependency _ignored of make_foo is not annotated"):

        @registry.provides(ApiRef("foo"))
        def make_foo(_ignored):
            pass


def test_throws_dependency_error_on_plain_type_annotation(registry):
    with pytest.raises(DependencyError, match="Dependency name of make_foo is not annotated"):

        @registry.provides(ApiRef("foo"))
        def make_foo(name: str) -> str:
            return name


def test_throws_dependency_error_on_non_callable_target(registry):
    with pytest.raises(DependencyError, match="is not a class or function"):
        registry.provides(ApiRef("foo"))(42)
