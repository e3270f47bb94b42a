"""Lowering of the syntax tree into the canonical schema model."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from dbcanvas.compiler.errors import (
    DuplicateEnumError,
    DuplicateFieldError,
    DuplicateTableError,
    SemanticError,
    UnresolvedReferenceError,
)
from dbcanvas.compiler.results import CompileFailure, CompileResult, CompileSuccess
from dbcanvas.compiler.syntax import ColumnRef, Document, EnumDecl, RefDecl, TableDecl
from dbcanvas.compiler.types import (
    DEFAULT_OPERATORS,
    Cardinality,
    Endpoint,
    Enum,
    EnumValue,
    Field,
    Relationship,
    SchemaModel,
    Table,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = getLogger(__name__)


@dataclass
class _Collector:
    """Accumulates semantic errors across the whole document."""

    errors: list[SemanticError] = field(default_factory=list)

    def add(self, error: SemanticError) -> None:
        logger.debug("Semantic error: %s", error)
        self.errors.append(error)


@dataclass
class _TableScope:
    """Declared tables reachable by name or alias."""

    declarations: dict[str, TableDecl] = field(default_factory=dict)
    aliases: dict[str, str] = field(default_factory=dict)

    def canonical(self, name: str) -> str | None:
        if name in self.declarations:
            return name
        return self.aliases.get(name)

    def has_field(self, table: str, name: str) -> bool:
        return any(f.name == name for f in self.declarations[table].fields)


def _collect_tables(document: Document, errors: _Collector) -> _TableScope:
    """Register every table once; later duplicates are reported, not merged."""
    scope = _TableScope()
    for decl in document.tables:
        if scope.canonical(decl.name) is not None:
            errors.add(DuplicateTableError(decl.name, decl.line, decl.column))
            continue
        if decl.alias is not None and scope.canonical(decl.alias) is not None:
            errors.add(DuplicateTableError(decl.alias, decl.line, decl.column))
            continue
        if decl.alias is not None and decl.alias == decl.name:
            errors.add(DuplicateTableError(decl.alias, decl.line, decl.column))
            continue

        scope.declarations[decl.name] = decl
        if decl.alias is not None:
            scope.aliases[decl.alias] = decl.name

        seen: set[str] = set()
        for field_decl in decl.fields:
            if field_decl.name in seen:
                errors.add(
                    DuplicateFieldError(
                        decl.name,
                        field_decl.name,
                        field_decl.line,
                        field_decl.column,
                    ),
                )
            seen.add(field_decl.name)
    return scope


def _collect_enums(document: Document, errors: _Collector) -> list[Enum]:
    enums: dict[str, EnumDecl] = {}
    for decl in document.enums:
        if decl.name in enums:
            errors.add(DuplicateEnumError(decl.name, decl.line, decl.column))
            continue
        enums[decl.name] = decl
    return [
        Enum(
            name=decl.name,
            values=tuple(EnumValue(v.name, v.note) for v in decl.values),
        )
        for decl in enums.values()
    ]


def _resolve_endpoint(
    ref: ColumnRef,
    context: str,
    scope: _TableScope,
    errors: _Collector,
) -> Endpoint | None:
    table = scope.canonical(ref.table)
    if table is None:
        errors.add(
            UnresolvedReferenceError(
                ref.table,
                context=context,
                line=ref.line,
                column=ref.column,
            ),
        )
        return None
    if not scope.has_field(table, ref.field):
        errors.add(
            UnresolvedReferenceError(
                ref.table,
                ref.field,
                context=context,
                line=ref.line,
                column=ref.column,
            ),
        )
        return None
    return Endpoint(table, ref.field)


def _reference_sites(document: Document) -> list[RefDecl]:
    """Every reference in source order, inline field refs lowered to RefDecl."""
    sites: list[RefDecl] = []
    for decl in document.declarations:
        if isinstance(decl, RefDecl):
            sites.append(decl)
        elif isinstance(decl, TableDecl):
            sites.extend(
                RefDecl(
                    source=ColumnRef(
                        decl.name,
                        field_decl.name,
                        field_decl.line,
                        field_decl.column,
                    ),
                    operator=inline.operator,
                    target=inline.target,
                    line=inline.line,
                    column=inline.column,
                )
                for field_decl in decl.fields
                for inline in field_decl.refs
            )
    return sites


def _resolve_relationships(
    document: Document,
    scope: _TableScope,
    operators: Mapping[str, Cardinality],
    errors: _Collector,
) -> list[Relationship]:
    relationships: list[Relationship] = []
    for site in _reference_sites(document):
        context = f"reference {site.source} {site.operator} {site.target}"
        # Resolve both sides so each unresolved endpoint is reported
        source = _resolve_endpoint(site.source, context, scope, errors)
        target = _resolve_endpoint(site.target, context, scope, errors)
        if source is None or target is None:
            continue
        relationships.append(
            Relationship(
                source=source,
                target=target,
                cardinality=operators[site.operator],
                name=site.name,
            ),
        )
    return relationships


def _index_flags(
    decl: TableDecl,
    errors: _Collector,
) -> tuple[set[str], set[str]]:
    """Primary key and unique field names declared through ``indexes``."""
    primary_keys: set[str] = set()
    unique: set[str] = set()
    declared = {f.name for f in decl.fields}
    for index in decl.indexes:
        missing = [c for c in index.columns if c not in declared]
        for column in missing:
            errors.add(
                UnresolvedReferenceError(
                    decl.name,
                    column,
                    context="index",
                    line=index.line,
                    column=index.column,
                ),
            )
        if missing:
            continue
        if index.primary_key:
            primary_keys.update(index.columns)
        if index.unique and len(index.columns) == 1:
            unique.update(index.columns)
    return primary_keys, unique


def _build_table(
    decl: TableDecl,
    foreign_keys: set[str],
    errors: _Collector,
) -> Table:
    primary_keys, unique = _index_flags(decl, errors)
    fields: dict[str, Field] = {}
    for f in decl.fields:
        # Duplicates were reported during collection; the first one wins
        fields.setdefault(
            f.name,
            Field(
                name=f.name,
                type=f.type,
                is_primary_key=f.primary_key or f.name in primary_keys,
                is_unique=f.unique or f.name in unique,
                is_not_null=f.not_null,
                is_foreign_key=f.name in foreign_keys,
                is_increment=f.increment,
                note=f.note,
                default=f.default,
            ),
        )
    return Table(
        name=decl.name,
        fields=tuple(fields.values()),
        alias=decl.alias,
        note=decl.note,
    )


def normalize(
    document: Document,
    *,
    operators: Mapping[str, Cardinality] = DEFAULT_OPERATORS,
) -> CompileResult:
    """Walk a syntax tree into a SchemaModel, collecting every semantic error.

    Args:
        document: Parsed declarations.
        operators: Relationship operator to cardinality table, laid over
            DEFAULT_OPERATORS so a partial mapping overrides only its keys.

    Returns:
        CompileSuccess with the complete model, or CompileFailure with all
        semantic errors found; never a model with relationships left out.

    """
    errors = _Collector()
    scope = _collect_tables(document, errors)
    enums = _collect_enums(document, errors)
    operators = {**DEFAULT_OPERATORS, **operators}
    relationships = _resolve_relationships(document, scope, operators, errors)

    foreign_keys: defaultdict[str, set[str]] = defaultdict(set)
    for relationship in relationships:
        if holder := relationship.foreign_key:
            foreign_keys[holder.table].add(holder.field)

    tables = [
        _build_table(decl, foreign_keys[name], errors)
        for name, decl in scope.declarations.items()
    ]

    if errors.errors:
        logger.debug("Normalization failed with %d errors", len(errors.errors))
        return CompileFailure(
            tuple(sorted(errors.errors, key=lambda e: (e.line or 0, e.column or 0))),
        )

    logger.debug(
        "Normalized %d tables, %d enums, %d relationships",
        len(tables),
        len(enums),
        len(relationships),
    )
    return CompileSuccess(
        SchemaModel(
            tables=tuple(tables),
            enums=tuple(enums),
            relationships=tuple(relationships),
        ),
    )
