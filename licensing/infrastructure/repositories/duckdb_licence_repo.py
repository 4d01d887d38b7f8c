# licensing/infrastructure/repositories/duckdb_licence_repo.py
#
# DuckDB implementation of LicenceRequirementRepository.
#
# Design decisions:
#   - Every call opens its own cursor on the shared connection. A DuckDB
#     connection object is not safe to share between threads, a cursor per
#     call is, and the batch resolver calls the repository from a thread pool.
#   - Writes go through _write(), which translates duckdb.Error into the
#     licensing error taxonomy. Reads let DuckDB errors propagate unchanged.
#   - sub_category_id is stored as NULL for a parent-category record. Every
#     query that filters on it uses IS NOT DISTINCT FROM so None matches NULL.
#   - ABN conditions have two layouts. Group-level columns are read and
#     written with the group; legacy rows are folded into AbnConditions by
#     load_abn_conditions().
#   - A group key is never rewritten by an UPDATE: it identifies the row for
#     create-or-skip and sits on a unique index. Licence types and
#     authorities are insert-only.
from __future__ import annotations

from collections.abc import Sequence

import duckdb

from licensing.domain.category.entities import CategoryState, CategoryView, ParentCategory, SubCategory
from licensing.domain.category.value_objects import normalize_sub_category_id
from licensing.domain.errors import ProcessingError
from licensing.domain.requirement.entities import AbnCondition, Authority, LicenceRequirementGroup, LicenceType
from licensing.domain.requirement.enums import AbnConditionKind
from licensing.domain.requirement.value_objects import AbnConditions

from ..store_errors import translate_store_error

_CATEGORY_STATE_COLUMNS = "id, parent_category_id, sub_category_id, state, licence_required, licence_note"
_GROUP_COLUMNS = (
    "id, name, key, min_required, state, authority_name, abn_company, abn_individual, "
    "abn_partnership, abn_trust, is_active, parent_category_id, sub_category_id"
)
_LICENCE_TYPE_COLUMNS = "id, name, state, licence_type, authority_id, is_active"
_AUTHORITY_COLUMNS = "id, authority, authority_name, state, link"


class DuckDBLicenceRequirementRepo:
    def __init__(self, conn: duckdb.DuckDBPyConnection) -> None:
        self._conn = conn

    # -- plumbing ------------------------------------------------------------

    def _fetchone(self, sql: str, params: Sequence[object] = ()) -> tuple | None:  # type: ignore[type-arg]
        with self._conn.cursor() as cur:
            return cur.execute(sql, list(params)).fetchone()

    def _fetchall(self, sql: str, params: Sequence[object] = ()) -> list[tuple]:  # type: ignore[type-arg]
        with self._conn.cursor() as cur:
            return cur.execute(sql, list(params)).fetchall()

    def _write(self, operation: str, sql: str, params: Sequence[object] = ()) -> tuple | None:  # type: ignore[type-arg]
        """Execute a write and return the first row (for RETURNING), if any."""
        try:
            with self._conn.cursor() as cur:
                cur.execute(sql, list(params))
                return cur.fetchone() if "RETURNING" in sql.upper() else None
        except duckdb.Error as err:
            raise translate_store_error(err, operation) from err

    def _write_many(self, operation: str, sql: str, rows: list[list[object]]) -> None:
        if not rows:
            return
        try:
            with self._conn.cursor() as cur:
                cur.executemany(sql, rows)
        except duckdb.Error as err:
            raise translate_store_error(err, operation) from err

    def _insert_returning_id(self, operation: str, sql: str, params: Sequence[object]) -> int:
        row = self._write(operation, sql, params)
        if row is None:
            raise ProcessingError(f"{operation} failed: the store returned no id")
        return int(row[0])

    def _count(self, sql: str) -> int:
        row = self._fetchone(sql)
        return int(row[0]) if row else 0

    # -- hydration -----------------------------------------------------------

    @staticmethod
    def _category_state(row: tuple) -> CategoryState:  # type: ignore[type-arg]
        """Columns: id(0), parent_category_id(1), sub_category_id(2), state(3),
        licence_required(4), licence_note(5)"""
        return CategoryState(
            parent_category_id=int(row[1]),
            sub_category_id=int(row[2]) if row[2] is not None else None,
            state=str(row[3]),
            licence_required=bool(row[4]),
            licence_note=str(row[5] or ""),
            id=int(row[0]),
        )

    @staticmethod
    def _group(row: tuple) -> LicenceRequirementGroup:  # type: ignore[type-arg]
        """Columns: id(0), name(1), key(2), min_required(3), state(4),
        authority_name(5), abn_company(6), abn_individual(7),
        abn_partnership(8), abn_trust(9), is_active(10),
        parent_category_id(11), sub_category_id(12)"""
        return LicenceRequirementGroup(
            name=str(row[1]),
            key=str(row[2]) if row[2] else None,
            min_required=int(row[3]),
            state=str(row[4]),
            authority_name=str(row[5]),
            abn_conditions=AbnConditions(
                company=row[6],
                individual=row[7],
                partnership=row[8],
                trust=row[9],
            ),
            is_active=bool(row[10]),
            parent_category_id=int(row[11]) if row[11] is not None else None,
            sub_category_id=int(row[12]) if row[12] is not None else None,
            id=int(row[0]),
        )

    @staticmethod
    def _licence_type(row: tuple) -> LicenceType:  # type: ignore[type-arg]
        return LicenceType(
            name=str(row[1]),
            state=str(row[2]),
            licence_type=str(row[3]),
            authority_id=int(row[4]) if row[4] is not None else None,
            is_active=bool(row[5]),
            id=int(row[0]),
        )

    @staticmethod
    def _authority(row: tuple) -> Authority:  # type: ignore[type-arg]
        return Authority(
            authority=str(row[1]),
            authority_name=str(row[2]),
            state=str(row[3]),
            link=str(row[4]) if row[4] is not None else None,
            id=int(row[0]),
        )

    @staticmethod
    def _abn_condition(row: tuple) -> AbnCondition:  # type: ignore[type-arg]
        return AbnCondition(
            category_state_id=int(row[1]),
            kind=AbnConditionKind(str(row[2])),
            message=str(row[3]),
            id=int(row[0]),
        )

    # -- categories ----------------------------------------------------------

    def find_parent_category(self, name: str) -> ParentCategory | None:
        row = self._fetchone("SELECT id, name FROM parent_category WHERE name = ? ORDER BY id LIMIT 1", [name])
        return ParentCategory(id=int(row[0]), name=str(row[1])) if row else None

    def find_parent_category_by_id(self, parent_category_id: int) -> ParentCategory | None:
        row = self._fetchone("SELECT id, name FROM parent_category WHERE id = ?", [parent_category_id])
        return ParentCategory(id=int(row[0]), name=str(row[1])) if row else None

    def _find_sub_category(self, where: str, value: object) -> SubCategory | None:
        row = self._fetchone(
            f"SELECT id, parent_id, name, short_name FROM sub_category WHERE {where} = ? ORDER BY id LIMIT 1",  # noqa: S608
            [value],
        )
        if row is None:
            return None
        return SubCategory(id=int(row[0]), parent_id=int(row[1]), name=str(row[2]), short_name=row[3])

    def find_sub_category(self, name: str) -> SubCategory | None:
        return self._find_sub_category("name", name)

    def find_sub_category_by_id(self, sub_category_id: int) -> SubCategory | None:
        return self._find_sub_category("id", sub_category_id)

    def find_sub_category_by_short_name(self, short_name: str) -> SubCategory | None:
        return self._find_sub_category("short_name", short_name)

    def count_categories(self) -> int:
        return self._count("SELECT (SELECT count(*) FROM parent_category) + (SELECT count(*) FROM sub_category)")

    def save_parent_categories(self, parents: list[ParentCategory]) -> int:
        self._write_many(
            "Save parent categories",
            "INSERT INTO parent_category (id, name) VALUES (?, ?)",
            [[p.id, p.name] for p in parents],
        )
        return len(parents)

    def save_sub_categories(self, subs: list[SubCategory]) -> int:
        self._write_many(
            "Save sub-categories",
            "INSERT INTO sub_category (id, parent_id, name, short_name) VALUES (?, ?, ?, ?)",
            [[s.id, s.parent_id, s.name, s.short_name] for s in subs],
        )
        return len(subs)

    def list_category_view(self) -> list[CategoryView]:
        rows = self._fetchall(
            """SELECT parent_category_id, name, short_name, sub_category_id
               FROM categories_view
               ORDER BY parent_category_id, sub_category_id NULLS FIRST"""
        )
        return [
            CategoryView(
                parent_category_id=int(r[0]),
                name=str(r[1]),
                short_name=r[2],
                sub_category_id=int(r[3]) if r[3] is not None else None,
            )
            for r in rows
        ]

    # -- category states -----------------------------------------------------

    def find_category_state(
        self, parent_category_id: int, sub_category_id: int | None, state: str
    ) -> CategoryState | None:
        row = self._fetchone(
            f"""SELECT {_CATEGORY_STATE_COLUMNS} FROM category_state
                WHERE parent_category_id = ?
                  AND sub_category_id IS NOT DISTINCT FROM ?
                  AND state = ?
                ORDER BY id LIMIT 1""",  # noqa: S608
            [parent_category_id, normalize_sub_category_id(sub_category_id), state],
        )
        return self._category_state(row) if row else None

    def find_category_state_by_id(self, category_state_id: int) -> CategoryState | None:
        row = self._fetchone(
            f"SELECT {_CATEGORY_STATE_COLUMNS} FROM category_state WHERE id = ?",  # noqa: S608
            [category_state_id],
        )
        return self._category_state(row) if row else None

    def save_category_state(self, category_state: CategoryState) -> CategoryState:
        params = [
            category_state.parent_category_id,
            category_state.sub_category_id,
            category_state.state,
            category_state.licence_required,
            category_state.licence_note,
        ]
        if category_state.id is None:
            new_id = self._insert_returning_id(
                "Save category state",
                """INSERT INTO category_state
                   (parent_category_id, sub_category_id, state, licence_required, licence_note)
                   VALUES (?, ?, ?, ?, ?) RETURNING id""",
                params,
            )
            return category_state.with_id(new_id)
        self._write(
            "Update category state",
            """UPDATE category_state
               SET parent_category_id = ?, sub_category_id = ?, state = ?,
                   licence_required = ?, licence_note = ?
               WHERE id = ?""",
            [*params, category_state.id],
        )
        return category_state

    def find_category_states_by_parent(self, parent_category_id: int) -> list[CategoryState]:
        rows = self._fetchall(
            f"SELECT {_CATEGORY_STATE_COLUMNS} FROM category_state WHERE parent_category_id = ? ORDER BY id",  # noqa: S608
            [parent_category_id],
        )
        return [self._category_state(r) for r in rows]

    def find_category_states_by_sub_category(self, sub_category_id: int) -> list[CategoryState]:
        rows = self._fetchall(
            f"SELECT {_CATEGORY_STATE_COLUMNS} FROM category_state WHERE sub_category_id = ? ORDER BY id",  # noqa: S608
            [sub_category_id],
        )
        return [self._category_state(r) for r in rows]

    def delete_category_state(self, category_state_id: int) -> None:
        self._write("Delete category state", "DELETE FROM category_state WHERE id = ?", [category_state_id])

    def clear_all_category_states(self) -> None:
        self._write("Clear category states", "DELETE FROM category_state")

    # -- legacy ABN conditions -----------------------------------------------

    def find_abn_conditions(self, category_state_id: int) -> list[AbnCondition]:
        rows = self._fetchall(
            """SELECT id, category_state_id, kind, message FROM category_state_abn_condition
               WHERE category_state_id = ? ORDER BY id""",
            [category_state_id],
        )
        return [self._abn_condition(r) for r in rows]

    def find_abn_condition(self, category_state_id: int, kind: AbnConditionKind) -> AbnCondition | None:
        row = self._fetchone(
            """SELECT id, category_state_id, kind, message FROM category_state_abn_condition
               WHERE category_state_id = ? AND kind = ? ORDER BY id LIMIT 1""",
            [category_state_id, kind.value],
        )
        return self._abn_condition(row) if row else None

    def load_abn_conditions(self, category_state_id: int) -> AbnConditions:
        messages: dict[str, str] = {}
        for condition in self.find_abn_conditions(category_state_id):
            messages.setdefault(condition.kind.value, condition.message)
        return AbnConditions.from_mapping(messages)

    def save_abn_condition(self, abn_condition: AbnCondition) -> AbnCondition:
        if abn_condition.id is None:
            new_id = self._insert_returning_id(
                "Save ABN condition",
                """INSERT INTO category_state_abn_condition (category_state_id, kind, message)
                   VALUES (?, ?, ?) RETURNING id""",
                [abn_condition.category_state_id, abn_condition.kind.value, abn_condition.message],
            )
            return AbnCondition(
                category_state_id=abn_condition.category_state_id,
                kind=abn_condition.kind,
                message=abn_condition.message,
                id=new_id,
            )
        self._write(
            "Update ABN condition",
            "UPDATE category_state_abn_condition SET category_state_id = ?, kind = ?, message = ? WHERE id = ?",
            [abn_condition.category_state_id, abn_condition.kind.value, abn_condition.message, abn_condition.id],
        )
        return abn_condition

    def delete_abn_conditions(self, category_state_id: int) -> None:
        self._write(
            "Delete ABN conditions",
            "DELETE FROM category_state_abn_condition WHERE category_state_id = ?",
            [category_state_id],
        )

    def clear_all_abn_conditions(self) -> None:
        self._write("Clear ABN conditions", "DELETE FROM category_state_abn_condition")

    # -- requirement groups --------------------------------------------------

    def _find_group(self, where: str, value: object) -> LicenceRequirementGroup | None:
        row = self._fetchone(
            f"SELECT {_GROUP_COLUMNS} FROM licence_requirement_group WHERE {where} = ? ORDER BY id LIMIT 1",  # noqa: S608
            [value],
        )
        return self._group(row) if row else None

    def find_licence_requirement_group(self, key: str) -> LicenceRequirementGroup | None:
        return self._find_group("key", key)

    def find_licence_requirement_group_by_name(self, name: str) -> LicenceRequirementGroup | None:
        return self._find_group("name", name)

    def find_licence_requirement_group_by_id(self, group_id: int) -> LicenceRequirementGroup | None:
        return self._find_group("id", group_id)

    def find_licence_requirement_groups_by_category(
        self, parent_category_id: int, sub_category_id: int | None = None
    ) -> list[LicenceRequirementGroup]:
        sub_id = normalize_sub_category_id(sub_category_id)
        if sub_id is not None:
            rows = self._fetchall(
                f"SELECT {_GROUP_COLUMNS} FROM licence_requirement_group WHERE sub_category_id = ? ORDER BY id",  # noqa: S608
                [sub_id],
            )
        else:
            rows = self._fetchall(
                f"SELECT {_GROUP_COLUMNS} FROM licence_requirement_group WHERE parent_category_id = ? ORDER BY id",  # noqa: S608
                [parent_category_id],
            )
        return [self._group(r) for r in rows]

    def save_licence_requirement_group(self, group: LicenceRequirementGroup) -> LicenceRequirementGroup:
        abn = group.abn_conditions
        params = [
            group.name,
            group.key,
            group.min_required,
            group.state,
            group.authority_name,
            abn.company,
            abn.individual,
            abn.partnership,
            abn.trust,
            group.is_active,
            group.parent_category_id,
            group.sub_category_id,
        ]
        if group.id is None:
            new_id = self._insert_returning_id(
                "Save licence requirement group",
                """INSERT INTO licence_requirement_group
                   (name, key, min_required, state, authority_name, abn_company, abn_individual,
                    abn_partnership, abn_trust, is_active, parent_category_id, sub_category_id)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?) RETURNING id""",
                params,
            )
            return group.with_id(new_id)
        self._write(
            "Update licence requirement group",
            """UPDATE licence_requirement_group
               SET name = ?, min_required = ?, state = ?, authority_name = ?,
                   abn_company = ?, abn_individual = ?, abn_partnership = ?, abn_trust = ?,
                   is_active = ?, parent_category_id = ?, sub_category_id = ?
               WHERE id = ?""",
            [params[0], *params[2:], group.id],
        )
        return group

    def delete_licence_requirement_group(self, group_id: int) -> None:
        self._write("Delete licence requirement group", "DELETE FROM licence_requirement_group WHERE id = ?", [group_id])

    def clear_all_licence_requirement_groups(self) -> None:
        self._write("Clear licence requirement groups", "DELETE FROM licence_requirement_group")

    # -- category state <-> group --------------------------------------------

    def find_category_state_licence_groups(self, category_state_id: int) -> list[LicenceRequirementGroup]:
        columns = ", ".join(f"g.{c.strip()}" for c in _GROUP_COLUMNS.split(","))
        rows = self._fetchall(
            f"""SELECT {columns}
                FROM category_state_licence_group l
                JOIN licence_requirement_group g ON g.id = l.licence_requirement_group_id
                WHERE l.category_state_id = ?
                ORDER BY g.id""",  # noqa: S608
            [category_state_id],
        )
        return [self._group(r) for r in rows]

    def save_category_state_licence_group(self, category_state_id: int, group_id: int) -> None:
        self._write(
            "Link licence requirement group to category state",
            """INSERT INTO category_state_licence_group (category_state_id, licence_requirement_group_id)
               VALUES (?, ?) ON CONFLICT DO NOTHING""",
            [category_state_id, group_id],
        )

    def delete_category_state_licence_groups(self, category_state_id: int) -> None:
        self._write(
            "Unlink licence requirement groups",
            "DELETE FROM category_state_licence_group WHERE category_state_id = ?",
            [category_state_id],
        )

    def clear_all_category_state_licence_groups(self) -> None:
        self._write("Clear category state links", "DELETE FROM category_state_licence_group")

    # -- group <-> licence type ----------------------------------------------

    def exists_licence_requirement_group_licence(self, group_id: int, licence_type_id: int) -> bool:
        row = self._fetchone(
            """SELECT 1 FROM licence_requirement_group_licence
               WHERE licence_requirement_group_id = ? AND licence_type_id = ?""",
            [group_id, licence_type_id],
        )
        return row is not None

    def save_licence_requirement_group_licence(self, group_id: int, licence_type_id: int) -> None:
        self._write(
            "Link licence type to group",
            """INSERT INTO licence_requirement_group_licence (licence_requirement_group_id, licence_type_id)
               VALUES (?, ?)""",
            [group_id, licence_type_id],
        )

    def delete_licence_requirement_group_licences(self, group_id: int) -> None:
        self._write(
            "Unlink licence types",
            "DELETE FROM licence_requirement_group_licence WHERE licence_requirement_group_id = ?",
            [group_id],
        )

    def clear_all_licence_requirement_group_licences(self) -> None:
        self._write("Clear group licence links", "DELETE FROM licence_requirement_group_licence")

    # -- licence types -------------------------------------------------------

    def find_licence_type(self, name: str) -> LicenceType | None:
        row = self._fetchone(
            f"SELECT {_LICENCE_TYPE_COLUMNS} FROM licence_type WHERE name = ?",  # noqa: S608
            [name],
        )
        return self._licence_type(row) if row else None

    def find_licence_types_by_group(self, group_id: int) -> list[LicenceType]:
        columns = ", ".join(f"t.{c.strip()}" for c in _LICENCE_TYPE_COLUMNS.split(","))
        rows = self._fetchall(
            f"""SELECT {columns}
                FROM licence_requirement_group_licence l
                JOIN licence_type t ON t.id = l.licence_type_id
                WHERE l.licence_requirement_group_id = ?
                ORDER BY t.id""",  # noqa: S608
            [group_id],
        )
        return [self._licence_type(r) for r in rows]

    def save_licence_type(self, licence_type: LicenceType) -> LicenceType:
        params = [
            licence_type.name,
            licence_type.state,
            licence_type.licence_type,
            licence_type.authority_id,
            licence_type.is_active,
        ]
        new_id = self._insert_returning_id(
            "Save licence type",
            """INSERT INTO licence_type (name, state, licence_type, authority_id, is_active)
               VALUES (?, ?, ?, ?, ?) RETURNING id""",
            params,
        )
        return LicenceType(
            name=licence_type.name,
            state=licence_type.state,
            licence_type=licence_type.licence_type,
            authority_id=licence_type.authority_id,
            is_active=licence_type.is_active,
            id=new_id,
        )

    def clear_all_licence_types(self) -> None:
        self._write("Clear licence types", "DELETE FROM licence_type")

    # -- authorities ---------------------------------------------------------

    def find_authority(self, authority: str) -> Authority | None:
        row = self._fetchone(
            f"SELECT {_AUTHORITY_COLUMNS} FROM authority WHERE authority = ? ORDER BY id LIMIT 1",  # noqa: S608
            [authority],
        )
        return self._authority(row) if row else None

    def find_authority_by_id(self, authority_id: int) -> Authority | None:
        row = self._fetchone(
            f"SELECT {_AUTHORITY_COLUMNS} FROM authority WHERE id = ?",  # noqa: S608
            [authority_id],
        )
        return self._authority(row) if row else None

    def save_authority(self, authority: Authority) -> Authority:
        new_id = self._insert_returning_id(
            "Save authority",
            "INSERT INTO authority (authority, authority_name, state, link) VALUES (?, ?, ?, ?) RETURNING id",
            [authority.authority, authority.authority_name, authority.state, authority.link],
        )
        return Authority(
            authority=authority.authority,
            authority_name=authority.authority_name,
            state=authority.state,
            link=authority.link,
            id=new_id,
        )

    def count_authorities(self) -> int:
        return self._count("SELECT count(*) FROM authority")

    def clear_all_authorities(self) -> None:
        self._write("Clear authorities", "DELETE FROM authority")
