# tests/conftest.py
"""
Shared fixtures: the canonical record set used throughout the suite.

    struct MoveConstructorThrows {                        // line 9
        MoveConstructorThrows(const MoveConstructorThrows&);
        MoveConstructorThrows(MoveConstructorThrows&&) noexcept(false);
    };
    struct DerivedFromMoveConstructorThrows : public MoveConstructorThrows {};
    class ContainsThrowingMoveConstructor {
        struct Inner { const MoveConstructorThrows Bar; };
        ExampleEnum ThisMemberIsFine;
        Inner Foo;
    };
    struct ContainsDeeplyNestedThrowingMoveConstructor {
        ContainsThrowingMoveConstructor Baz;
    };
    struct NothrowMoveConstructibleExample { ... noexcept ... };
    struct TriviallyCopyableExample { int I; };
"""

import pytest

from tests.helpers import (
    EXAMPLE_ENUM,
    INT,
    base,
    field,
    nothrow_record,
    record,
    throwing_record,
)


@pytest.fixture
def throwing():
    return throwing_record()


@pytest.fixture
def derived(throwing):
    return record("DerivedFromMoveConstructorThrows", line=18,
                  bases=[base(throwing, line=18)])


@pytest.fixture
def inner(throwing):
    return record("ContainsThrowingMoveConstructor::Inner", line=28,
                  fields=[field("Bar", throwing, line=29, const=True)])


@pytest.fixture
def contains(inner):
    return record("ContainsThrowingMoveConstructor", line=25, fields=[
        field("ThisMemberIsFine", EXAMPLE_ENUM, line=31),
        field("Foo", inner, line=32),
    ])


@pytest.fixture
def deeply_nested(contains):
    return record("ContainsDeeplyNestedThrowingMoveConstructor", line=45,
                  fields=[field("Baz", contains, line=46)])


@pytest.fixture
def nothrow():
    return nothrow_record()


@pytest.fixture
def trivial():
    return record("TriviallyCopyableExample", line=70,
                  fields=[field("I", INT, line=71)],
                  trivially_copyable=True)
