"""
vector_pessimization/frontend.py
════════════════════════════════

Cppcheck dump frontend: builds the descriptor graph of
:mod:`vector_pessimization.descriptors` from a
``cppcheckdata.Configuration``.

What comes from where
─────────────────────

  ┌──────────────────────┬──────────────────────────────────────────────┐
  │ descriptor           │ cppcheck source                              │
  ├──────────────────────┼──────────────────────────────────────────────┤
  │ records              │ scopes of type Class / Struct / Union        │
  │ enums                │ scopes of type Enum                          │
  │ fields               │ ``scope.varlist`` (static → not own member)  │
  │ field types          │ ``valueType.typeScope``, else declaration    │
  │                      │ tokens resolved by name                      │
  │ bases                │ tokens between the class name and ``{``      │
  │ constructors         │ ``scope.functions`` (Constructor,            │
  │                      │ CopyConstructor, MoveConstructor)            │
  │ exception specs      │ tokens after the parameter list              │
  │ container sites      │ ``std :: vector < T >`` in the token list    │
  └──────────────────────┴──────────────────────────────────────────────┘

The implicit move and copy constructors are synthesised following the
language rules, and the trivially-copyable fact is computed here: the
analysis only consumes it.

Anything that cannot be resolved becomes an incomplete record, which the
analysis treats as safe.  All cppcheck objects are accessed through
``getattr`` so mock objects work as well as real dump data.

License: MIT — same as vector-pessimization.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, Iterator, List, Optional, Set, Tuple

from vector_pessimization.descriptors import (
    BaseDescriptor,
    ConstructorDescriptor,
    ExceptionSpecKind,
    FieldDescriptor,
    RecordDescriptor,
    SourceLocation,
    TypeDescriptor,
)
from vector_pessimization.triviality import is_trivially_copyable

_log = logging.getLogger(__name__)

RECORD_SCOPE_TYPES: FrozenSet[str] = frozenset({"Class", "Struct", "Union"})

BUILTIN_NAMES: FrozenSet[str] = frozenset({
    "bool", "char", "char8_t", "char16_t", "char32_t", "wchar_t",
    "short", "int", "long", "signed", "unsigned", "float", "double", "void",
    "size_t", "ssize_t", "ptrdiff_t", "intptr_t", "uintptr_t",
    "int8_t", "int16_t", "int32_t", "int64_t",
    "uint8_t", "uint16_t", "uint32_t", "uint64_t",
    "nullptr_t", "byte",
})

# valueType.type values cppcheck uses for arithmetic types
BUILTIN_VALUE_TYPES: FrozenSet[str] = frozenset({
    "bool", "char", "short", "wchar_t", "int", "long", "long long",
    "unknown int", "float", "double", "long double",
})

_CV_AND_ELABORATION: FrozenSet[str] = frozenset({
    "const", "volatile", "mutable", "static", "struct", "class", "union",
    "enum", "typename",
})

_ACCESS_KEYWORDS: FrozenSet[str] = frozenset({"public", "protected", "private"})

_SPECIAL_MEMBERS: FrozenSet[str] = frozenset({
    "CopyConstructor", "MoveConstructor", "OperatorEqual", "Destructor",
})

_CONSTRUCTOR_TYPES: FrozenSet[str] = frozenset({
    "Constructor", "CopyConstructor", "MoveConstructor",
})


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — TOKEN HELPERS
# ═════════════════════════════════════════════════════════════════════════

def _tok_str(tok: Any) -> str:
    return getattr(tok, "str", "") or ""


def _tok_loc(tok: Any) -> SourceLocation:
    if tok is None:
        return SourceLocation()
    return SourceLocation(
        file=getattr(tok, "file", "") or "",
        line=getattr(tok, "linenr", 0) or 0,
        column=getattr(tok, "column", 0) or 0,
    )


def _scope_key(scope: Any) -> Any:
    return getattr(scope, "Id", None) or id(scope)


def _closing_paren(open_tok: Any) -> Any:
    """Return the ``)`` matching *open_tok*, via ``link`` when available."""
    link = getattr(open_tok, "link", None)
    if link is not None:
        return link
    depth = 0
    tok = open_tok
    while tok is not None:
        s = _tok_str(tok)
        if s == "(":
            depth += 1
        elif s == ")":
            depth -= 1
            if depth == 0:
                return tok
        tok = getattr(tok, "next", None)
    return None


def _tokens_between(start: Any, end: Any) -> List[Any]:
    """Tokens strictly after *start* and strictly before *end*."""
    out = []
    tok = getattr(start, "next", None)
    while tok is not None and tok is not end:
        out.append(tok)
        tok = getattr(tok, "next", None)
    return out


def _split_top_level(tokens: Iterable[Any]) -> List[List[Any]]:
    """Split on ``,`` outside of ``<>`` and ``()``."""
    groups: List[List[Any]] = [[]]
    depth = 0
    for tok in tokens:
        s = _tok_str(tok)
        if s in ("<", "("):
            depth += 1
        elif s in (">", ")"):
            depth -= 1
        elif s == "," and depth == 0:
            groups.append([])
            continue
        groups[-1].append(tok)
    return [g for g in groups if g]


def _spell(tokens: Iterable[Any]) -> str:
    return "".join(_tok_str(t) for t in tokens)


def _strip_template_args(name: str) -> str:
    idx = name.find("<")
    return name[:idx] if idx >= 0 else name


def _top_level(tokens: List[Any]) -> List[Any]:
    """Drop template argument lists, angle brackets included."""
    out = []
    depth = 0
    for tok in tokens:
        s = _tok_str(tok)
        if s == "<":
            depth += 1
        elif s == ">" and depth:
            depth -= 1
        elif depth == 0:
            out.append(tok)
    return out


def _is_move_assignment(func: Any) -> bool:
    """``operator=`` taking an rvalue reference."""
    tok = getattr(func, "tokenDef", None)
    for _ in range(3):
        if tok is None or _tok_str(tok) == "(":
            break
        tok = getattr(tok, "next", None)
    if _tok_str(tok) != "(":
        return False
    params = _tokens_between(tok, _closing_paren(tok))
    return any(_tok_str(t) == "&&" for t in _top_level(params))


def _is_builtin_spelling(tokens: List[Any]) -> bool:
    names = [_tok_str(t) for t in tokens if _tok_str(t) not in ("::", "std")]
    return bool(names) and all(n in BUILTIN_NAMES for n in names)


@dataclass(frozen=True)
class ContainerSite:
    """One ``container<element>`` occurrence in the token list."""
    container: str
    element_type: TypeDescriptor
    location: SourceLocation


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — FRONTEND
# ═════════════════════════════════════════════════════════════════════════

class CppcheckFrontend:
    """
    Descriptor factory over one ``cppcheckdata.Configuration``.

    Usage
    -----
    >>> fe = CppcheckFrontend(cfg)
    >>> for site in fe.container_sites(["std::vector"]):
    ...     on_container_instantiation(site.element_type, site.location)

    Descriptors are memoised per instance; build one frontend per
    configuration.
    """

    def __init__(self, cfg: Any) -> None:
        self.cfg = cfg
        self._qualified: Dict[str, Any] = {}
        self._simple: Dict[str, List[Any]] = {}
        self._enums: Set[str] = set()
        self._records: Dict[Any, TypeDescriptor] = {}
        self._in_progress: Set[Any] = set()
        self._index_scopes()

    # ── Scope indexing ───────────────────────────────────────────────

    def _index_scopes(self) -> None:
        for scope in getattr(self.cfg, "scopes", None) or []:
            stype = getattr(scope, "type", "")
            name = getattr(scope, "className", "") or ""
            if not name:
                continue
            if stype == "Enum":
                self._enums.add(name)
                self._enums.add(self.qualified_name(scope))
            elif stype in RECORD_SCOPE_TYPES:
                self._qualified.setdefault(self.qualified_name(scope), scope)
                self._simple.setdefault(name, []).append(scope)

    @staticmethod
    def qualified_name(scope: Any) -> str:
        parts = [getattr(scope, "className", "") or ""]
        outer = getattr(scope, "nestedIn", None)
        while outer is not None:
            if getattr(outer, "type", "") in RECORD_SCOPE_TYPES | {"Namespace"}:
                outer_name = getattr(outer, "className", "") or ""
                if outer_name:
                    parts.append(outer_name)
            outer = getattr(outer, "nestedIn", None)
        return "::".join(reversed(parts))

    def find_record_scope(self, name: str) -> Optional[Any]:
        """Resolve a (possibly qualified) record name to its scope."""
        key = _strip_template_args(name).lstrip(":")
        if key in self._qualified:
            return self._qualified[key]
        candidates = self._simple.get(key.rsplit("::", 1)[-1], [])
        for scope in candidates:
            if self.qualified_name(scope).endswith(key):
                return scope
        return None

    def is_enum_name(self, name: str) -> bool:
        key = name.lstrip(":")
        return key in self._enums or key.rsplit("::", 1)[-1] in self._enums

    # ── Type resolution ──────────────────────────────────────────────

    def lookup_type(self, name: str) -> TypeDescriptor:
        """Resolve a spelled type name; unknown names are incomplete records."""
        if self.is_enum_name(name):
            return TypeDescriptor.enum(name)
        scope = self.find_record_scope(name)
        if scope is not None:
            return self.record_type(scope)
        _log.debug("no definition visible for '%s'", name)
        return TypeDescriptor.incomplete(name)

    def type_from_tokens(self, tokens: List[Any]) -> TypeDescriptor:
        """Resolve a type spelled by *tokens* (cv-qualifiers ignored)."""
        tokens = [t for t in tokens if _tok_str(t) not in _CV_AND_ELABORATION]
        outer = _top_level(tokens)
        name = _spell(t for t in tokens if _tok_str(t) not in ("*", "&", "&&"))
        if any(_tok_str(t) in ("*", "&", "&&") for t in outer):
            return TypeDescriptor.pointer(_spell(tokens))
        if _is_builtin_spelling(tokens):
            return TypeDescriptor.builtin(" ".join(_tok_str(t) for t in tokens))
        # typeScope inside template arguments names an argument, not the type
        for tok in reversed(outer):
            type_scope = getattr(tok, "typeScope", None)
            if type_scope is not None:
                return self._type_from_scope(type_scope, name)
        return self.lookup_type(name)

    def _type_from_scope(self, scope: Any, name: str) -> TypeDescriptor:
        stype = getattr(scope, "type", "")
        if stype == "Enum":
            return TypeDescriptor.enum(name or self.qualified_name(scope))
        if stype in RECORD_SCOPE_TYPES:
            return self.record_type(scope)
        return self.lookup_type(name)

    def variable_type(self, var: Any) -> TypeDescriptor:
        """Type of a member variable, arrays reduced to their element type."""
        start = getattr(var, "typeStartToken", None)
        end = getattr(var, "typeEndToken", None)
        tokens: List[Any] = []
        tok = start
        while tok is not None:
            tokens.append(tok)
            if tok is end:
                break
            tok = getattr(tok, "next", None)

        if getattr(var, "isPointer", False) or getattr(var, "isReference", False):
            return TypeDescriptor.pointer(_spell(tokens) or "?")

        name_tok = getattr(var, "nameToken", None)
        vtype = getattr(name_tok, "valueType", None)
        if vtype is not None and not getattr(vtype, "pointer", 0):
            type_scope = getattr(vtype, "typeScope", None)
            spelled = _spell(t for t in tokens
                             if _tok_str(t) not in _CV_AND_ELABORATION)
            # containers and smart pointers carry their element's scope
            if type_scope is not None and (
                    getattr(vtype, "type", "") == "record"
                    or getattr(type_scope, "type", "") == "Enum"):
                return self._type_from_scope(type_scope, spelled)
            if getattr(vtype, "type", "") in BUILTIN_VALUE_TYPES:
                return TypeDescriptor.builtin(getattr(vtype, "type"))
        return self.type_from_tokens(tokens)

    # ── Records ──────────────────────────────────────────────────────

    def record_type(self, scope: Any) -> TypeDescriptor:
        """Build (or fetch) the descriptor for a record scope."""
        key = _scope_key(scope)
        cached = self._records.get(key)
        if cached is not None:
            return cached
        name = self.qualified_name(scope)
        if key in self._in_progress or getattr(scope, "bodyStart", None) is None:
            return TypeDescriptor.incomplete(name)

        self._in_progress.add(key)
        try:
            name_tok, base_tokens = self._class_head(scope)
            bases = tuple(self._bases(base_tokens))
            fields = tuple(self._fields(scope))
            ctors = tuple(self._constructors(scope, name_tok))
            record = RecordDescriptor(
                name=name,
                definition_site=_tok_loc(name_tok or getattr(scope, "bodyStart", None)),
                constructors=ctors,
                fields=fields,
                bases=bases,
                is_trivially_copyable=self._trivially_copyable(scope, bases, fields),
            )
        finally:
            self._in_progress.discard(key)

        descriptor = TypeDescriptor.record(record)
        self._records[key] = descriptor
        return descriptor

    def _class_head(self, scope: Any) -> Tuple[Any, List[Any]]:
        """Return the class-name token and the base-clause tokens."""
        body_start = getattr(scope, "bodyStart", None)
        keyword = getattr(body_start, "previous", None)
        while keyword is not None and _tok_str(keyword) not in ("class", "struct", "union"):
            if _tok_str(keyword) in (";", "}", "{"):
                return None, []
            keyword = getattr(keyword, "previous", None)
        if keyword is None:
            return None, []
        name_tok = getattr(keyword, "next", None)
        head = _tokens_between(name_tok, body_start)
        while head and _tok_str(head[0]) in ("final", "alignas"):
            head = head[1:]
        if head and _tok_str(head[0]) == ":":
            return name_tok, head[1:]
        return name_tok, []

    def _bases(self, tokens: List[Any]) -> Iterator[BaseDescriptor]:
        for group in _split_top_level(tokens):
            is_virtual = False
            name_tokens = []
            for tok in group:
                s = _tok_str(tok)
                if s == "virtual" and not name_tokens:
                    is_virtual = True
                elif s in _ACCESS_KEYWORDS and not name_tokens:
                    continue
                else:
                    name_tokens.append(tok)
            if not name_tokens:
                continue
            yield BaseDescriptor(
                type=self.type_from_tokens(name_tokens),
                is_virtual=is_virtual,
                location=_tok_loc(name_tokens[0]),
            )

    def _fields(self, scope: Any) -> Iterator[FieldDescriptor]:
        for var in getattr(scope, "varlist", None) or []:
            name_tok = getattr(var, "nameToken", None)
            yield FieldDescriptor(
                name=_tok_str(name_tok) or "?",
                type=self.variable_type(var),
                is_own_data_member=not getattr(var, "isStatic", False),
                location=_tok_loc(name_tok),
                is_const=self._is_const_member(var),
            )

    @staticmethod
    def _is_const_member(var: Any) -> bool:
        """``const`` on the member object itself, not on a pointee."""
        tok = getattr(var, "typeStartToken", None)
        end = getattr(var, "typeEndToken", None)
        tokens = []
        while tok is not None:
            tokens.append(tok)
            if tok is end:
                break
            tok = getattr(tok, "next", None)
        outer = [_tok_str(t) for t in _top_level(tokens)]
        if any(s in ("*", "&", "&&") for s in outer):
            return outer[-1] == "const"
        return "const" in outer

    def _constructors(self, scope: Any, name_tok: Any) -> Iterator[ConstructorDescriptor]:
        class_name = getattr(scope, "className", "") or ""
        functions = list(getattr(scope, "functions", None) or [])
        declared = {getattr(f, "type", "") for f in functions}
        if any(getattr(f, "type", "") == "OperatorEqual" and _is_move_assignment(f)
               for f in functions):
            declared.add("MoveAssignment")

        for func in functions:
            ftype = getattr(func, "type", "")
            if ftype not in _CONSTRUCTOR_TYPES:
                continue
            spec, defaulted, deleted = read_exception_spec(getattr(func, "tokenDef", None))
            defaulted = defaulted or bool(getattr(func, "isDefault", False))
            deleted = deleted or bool(getattr(func, "isDelete", False))
            if defaulted and spec is ExceptionSpecKind.NONE:
                spec = ExceptionSpecKind.UNEVALUATED
            yield ConstructorDescriptor(
                name=class_name,
                location=_tok_loc(getattr(func, "tokenDef", None)),
                is_move_constructor=ftype == "MoveConstructor",
                is_copy_constructor=ftype == "CopyConstructor",
                is_user_provided=not (defaulted or deleted),
                is_defaulted=defaulted,
                is_deleted=deleted,
                exception_spec=spec,
            )

        # Implicitly declared special members.
        location = _tok_loc(name_tok)
        if not declared & _SPECIAL_MEMBERS:
            yield ConstructorDescriptor(
                name=class_name, location=location,
                is_move_constructor=True, is_defaulted=True,
                exception_spec=ExceptionSpecKind.UNEVALUATED,
            )
        if not declared & {"CopyConstructor", "MoveConstructor", "MoveAssignment"}:
            yield ConstructorDescriptor(
                name=class_name, location=location,
                is_copy_constructor=True, is_defaulted=True,
                exception_spec=ExceptionSpecKind.UNEVALUATED,
            )

    def _trivially_copyable(
        self,
        scope: Any,
        bases: Tuple[BaseDescriptor, ...],
        fields: Tuple[FieldDescriptor, ...],
    ) -> bool:
        for func in getattr(scope, "functions", None) or []:
            if getattr(func, "hasVirtualSpecifier", False) or \
                    getattr(func, "isImplicitlyVirtual", False):
                return False
            if getattr(func, "type", "") in _SPECIAL_MEMBERS:
                _, defaulted, _ = read_exception_spec(getattr(func, "tokenDef", None))
                if not (defaulted or getattr(func, "isDefault", False)):
                    return False
        for base in bases:
            if base.is_virtual or not is_trivially_copyable(base.type):
                return False
        for fld in fields:
            if fld.is_own_data_member and not is_trivially_copyable(fld.type):
                return False
        return True

    # ── Container sites ──────────────────────────────────────────────

    def container_sites(self, containers: Iterable[str]) -> Iterator[ContainerSite]:
        """Yield every ``container<T>`` occurrence, in token order."""
        wanted = {c.lstrip(":").split("::")[-1]: c.lstrip(":") for c in containers}
        seen: Set[SourceLocation] = set()
        for tok in getattr(self.cfg, "tokenlist", None) or []:
            container = wanted.get(_tok_str(tok))
            if container is None:
                continue
            if not _qualifier_matches(tok, container):
                continue
            open_angle = getattr(tok, "next", None)
            if _tok_str(open_angle) != "<":
                continue
            arg_tokens = _first_template_argument(open_angle)
            if not arg_tokens:
                continue
            location = _tok_loc(tok)
            if location in seen:
                continue
            seen.add(location)
            yield ContainerSite(
                container=container,
                element_type=self.type_from_tokens(arg_tokens),
                location=location,
            )


# ═════════════════════════════════════════════════════════════════════════
#  PART 3 — DECLARATION SCANNING
# ═════════════════════════════════════════════════════════════════════════

def read_exception_spec(name_tok: Any) -> Tuple[ExceptionSpecKind, bool, bool]:
    """
    Read the specifiers following a function declarator.

    *name_tok* is the function's name token (``Function.tokenDef``).
    Returns ``(spec, is_defaulted, is_deleted)``.
    """
    spec = ExceptionSpecKind.NONE
    open_paren = getattr(name_tok, "next", None)
    if _tok_str(open_paren) != "(":
        return spec, False, False
    tok = getattr(_closing_paren(open_paren), "next", None)
    defaulted = deleted = False

    while tok is not None and _tok_str(tok) not in ("{", ";", ":"):
        s = _tok_str(tok)
        nxt = getattr(tok, "next", None)
        if s == "noexcept":
            if _tok_str(nxt) == "(":
                close = _closing_paren(nxt)
                inner = [_tok_str(t) for t in _tokens_between(nxt, close)]
                if inner == ["true"]:
                    spec = ExceptionSpecKind.NOEXCEPT_TRUE
                elif inner == ["false"]:
                    spec = ExceptionSpecKind.NOEXCEPT_FALSE
                else:
                    spec = ExceptionSpecKind.DEPENDENT_NOEXCEPT
                tok = close
            else:
                spec = ExceptionSpecKind.BASIC_NOEXCEPT
        elif s == "throw" and _tok_str(nxt) == "(":
            close = _closing_paren(nxt)
            if _tokens_between(nxt, close):
                spec = ExceptionSpecKind.DYNAMIC
            else:
                spec = ExceptionSpecKind.DYNAMIC_NONE
            tok = close
        elif s == "=":
            if _tok_str(nxt) == "default":
                defaulted = True
            elif _tok_str(nxt) == "delete":
                deleted = True
        tok = getattr(tok, "next", None)
    return spec, defaulted, deleted


def _qualifier_matches(tok: Any, container: str) -> bool:
    """Check the ``ns ::`` tokens in front of *tok* against *container*."""
    qualifiers = container.split("::")[:-1]
    cur = getattr(tok, "previous", None)
    for part in reversed(qualifiers):
        if _tok_str(cur) != "::":
            return False
        cur = getattr(cur, "previous", None)
        if _tok_str(cur) != part:
            return False
        cur = getattr(cur, "previous", None)
    return True


def _first_template_argument(open_angle: Any) -> List[Any]:
    close = getattr(open_angle, "link", None)
    tokens: List[Any] = []
    depth = 0
    tok = getattr(open_angle, "next", None)
    while tok is not None and tok is not close:
        s = _tok_str(tok)
        if s in ("<", "("):
            depth += 1
        elif s in (">", ")"):
            if depth == 0:
                break
            depth -= 1
        elif s == "," and depth == 0:
            break
        elif s in (";", "{", "}"):
            return []
        tokens.append(tok)
        tok = getattr(tok, "next", None)
    return tokens


__all__ = [
    "CppcheckFrontend",
    "ContainerSite",
    "read_exception_spec",
    "BUILTIN_NAMES",
]
