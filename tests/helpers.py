# tests/helpers.py
"""
Builders shared by the test-suite: descriptor factories for the analysis
core, and lightweight stand-ins for ``cppcheckdata`` objects for the
frontend and checker tests.
"""

import re
from typing import Any, List, Optional

from vector_pessimization.descriptors import (
    BaseDescriptor,
    ConstructorDescriptor,
    ExceptionSpecKind,
    FieldDescriptor,
    RecordDescriptor,
    SourceLocation,
    TypeDescriptor,
)

FILE = "vector-pessimization.cpp"


# ═════════════════════════════════════════════════════════════════════════
#  Descriptor builders
# ═════════════════════════════════════════════════════════════════════════

def loc(line: int, column: int = 1) -> SourceLocation:
    return SourceLocation(file=FILE, line=line, column=column)


def move_ctor(name, spec=ExceptionSpecKind.NONE, line=0, user_provided=True):
    return ConstructorDescriptor(
        name=name,
        location=loc(line, 5),
        is_move_constructor=True,
        is_user_provided=user_provided,
        exception_spec=spec,
    )


def copy_ctor(name, spec=ExceptionSpecKind.NONE, line=0):
    return ConstructorDescriptor(
        name=name,
        location=loc(line, 5),
        is_copy_constructor=True,
        is_user_provided=True,
        exception_spec=spec,
    )


def implicit_ctors(name, line=0):
    """The implicitly declared move and copy constructors."""
    return (
        ConstructorDescriptor(
            name=name, location=loc(line, 8), is_move_constructor=True,
            is_defaulted=True, exception_spec=ExceptionSpecKind.UNEVALUATED,
        ),
        ConstructorDescriptor(
            name=name, location=loc(line, 8), is_copy_constructor=True,
            is_defaulted=True, exception_spec=ExceptionSpecKind.UNEVALUATED,
        ),
    )


def field(name, type_, line=0, own=True, const=False):
    return FieldDescriptor(name=name, type=type_, is_own_data_member=own,
                           location=loc(line, 11), is_const=const)


def base(type_, virtual=False, line=0):
    return BaseDescriptor(type=type_, is_virtual=virtual, location=loc(line, 43))


def record(name, fields=(), bases=(), ctors=None, line=0,
           trivially_copyable=False):
    """Record type; ``ctors=None`` means only the implicit ones."""
    if ctors is None:
        ctors = implicit_ctors(name, line)
    return TypeDescriptor.record(RecordDescriptor(
        name=name,
        definition_site=loc(line, 8),
        constructors=tuple(ctors),
        fields=tuple(fields),
        bases=tuple(bases),
        is_trivially_copyable=trivially_copyable,
    ))


INT = TypeDescriptor.builtin("int")
EXAMPLE_ENUM = TypeDescriptor.enum("ExampleEnum")


def throwing_record(name="MoveConstructorThrows", line=9):
    """``T(T&&) noexcept(false)`` plus a user copy constructor."""
    return record(name, line=line, ctors=[
        copy_ctor(name, line=line + 1),
        move_ctor(name, ExceptionSpecKind.NOEXCEPT_FALSE, line=line + 2),
    ])


def nothrow_record(name="NothrowMoveConstructibleExample", line=60):
    return record(name, line=line, ctors=[
        copy_ctor(name, line=line + 1),
        move_ctor(name, ExceptionSpecKind.BASIC_NOEXCEPT, line=line + 2),
    ])


def nested(depth, leaf=None):
    """*depth* records each holding the next one as field ``m``."""
    current = leaf or throwing_record("Leaf", line=100)
    for level in range(depth, 0, -1):
        current = record(f"Level{level}", line=level * 10,
                         fields=[field("m", current, line=level * 10 + 1)])
    return current


# ═════════════════════════════════════════════════════════════════════════
#  cppcheckdata stand-ins
# ═════════════════════════════════════════════════════════════════════════

class MockToken:
    def __init__(self, s: str, linenr: int = 1, column: int = 1,
                 file: str = FILE) -> None:
        self.str = s
        self.linenr = linenr
        self.column = column
        self.file = file
        self.next: Optional["MockToken"] = None
        self.previous: Optional["MockToken"] = None
        self.link: Optional["MockToken"] = None
        self.typeScope = None
        self.valueType = None
        self.scope = None

    def __repr__(self) -> str:
        return f"<MockToken {self.str!r} {self.linenr}:{self.column}>"


class MockScope:
    def __init__(self, type: str, className: str = "", bodyStart=None,
                 nestedIn=None, varlist=None, functions=None, Id=None) -> None:
        self.type = type
        self.className = className
        self.bodyStart = bodyStart
        self.bodyEnd = getattr(bodyStart, "link", None)
        self.nestedIn = nestedIn
        self.varlist = varlist or []
        self.functions = functions or []
        self.Id = Id or f"{type}:{className}"


class MockVariable:
    def __init__(self, nameToken, typeStartToken, typeEndToken=None,
                 isStatic=False, isPointer=False, isReference=False,
                 isArray=False, valueType=None) -> None:
        self.nameToken = nameToken
        self.typeStartToken = typeStartToken
        self.typeEndToken = typeEndToken or typeStartToken
        self.isStatic = isStatic
        self.isPointer = isPointer
        self.isReference = isReference
        self.isArray = isArray
        if valueType is not None:
            nameToken.valueType = valueType


class MockValueType:
    def __init__(self, type: str = "record", typeScope=None, pointer: int = 0):
        self.type = type
        self.typeScope = typeScope
        self.pointer = pointer


class MockFunction:
    def __init__(self, type: str, tokenDef, name: str = "",
                 hasVirtualSpecifier: bool = False) -> None:
        self.type = type
        self.tokenDef = tokenDef
        self.name = name or tokenDef.str
        self.hasVirtualSpecifier = hasVirtualSpecifier
        self.isImplicitlyVirtual = False


class MockSuppression:
    def __init__(self, errorId: str, fileName: str = "", lineNumber: int = 0):
        self.errorId = errorId
        self.fileName = fileName
        self.lineNumber = lineNumber


class MockConfiguration:
    def __init__(self, tokenlist=None, scopes=None, suppressions=None):
        self.tokenlist = tokenlist or []
        self.scopes = scopes or []
        self.suppressions = suppressions or []


class MockCppcheckData:
    def __init__(self, configurations):
        self.configurations = configurations


_TOKEN_RE = re.compile(r"::|&&|[A-Za-z_]\w*|\d+|\S")
_PAIRS = {")": "(", "}": "{", "]": "[", ">": "<"}


def tokenize(src: str, file: str = FILE) -> List[MockToken]:
    """Split *src* into linked tokens (brackets, braces and angles linked)."""
    tokens: List[MockToken] = []
    for lineno, text in enumerate(src.splitlines(), start=1):
        for m in _TOKEN_RE.finditer(text):
            tokens.append(MockToken(m.group(0), lineno, m.start() + 1, file))
    stacks = {opener: [] for opener in _PAIRS.values()}
    for prev, tok in zip([None] + tokens[:-1], tokens):
        tok.previous = prev
        if prev is not None:
            prev.next = tok
        if tok.str in stacks:
            stacks[tok.str].append(tok)
        elif tok.str in _PAIRS and stacks[_PAIRS[tok.str]]:
            opener = stacks[_PAIRS[tok.str]].pop()
            opener.link = tok
            tok.link = opener
    return tokens


def find_tok(tokens: List[MockToken], s: str, line: Optional[int] = None,
             nth: int = 0) -> MockToken:
    matches = [t for t in tokens if t.str == s and (line is None or t.linenr == line)]
    return matches[nth]


def record_scope(tokens, name, type="Struct", nestedIn=None, **kw) -> MockScope:
    """Scope for the record named *name*; ``bodyStart`` is its ``{``."""
    name_tok = next(t for t in tokens
                    if t.str == name and t.previous is not None
                    and t.previous.str in ("struct", "class", "union"))
    body = name_tok
    while body.str != "{":
        body = body.next
    return MockScope(type, name, bodyStart=body, nestedIn=nestedIn, **kw)


def member(tokens, name, line, scope=None, **kw) -> MockVariable:
    """Member variable declared as ``<type tokens> name ;`` on *line*."""
    name_tok = find_tok(tokens, name, line=line)
    start = name_tok
    while start.previous is not None and start.previous.linenr == line \
            and start.previous.str not in ("{", ";", "}", ":"):
        start = start.previous
    vtype = None
    if scope is not None:
        vtype = MockValueType("record", typeScope=scope)
    return MockVariable(name_tok, start, name_tok.previous, valueType=vtype, **kw)


def ctor(tokens, name, line, type="Constructor") -> MockFunction:
    return MockFunction(type, find_tok(tokens, name, line=line))
