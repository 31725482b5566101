# SPDX-FileCopyrightText: 2020,2021 University of Rochester
#
# SPDX-License-Identifier: MIT

#
# stmtspec.py
#
# Describes which diagrams are generated from the SQL grammar, and how
# each statement's production is simplified before it is drawn.

import re
from dataclasses import dataclass, field
from typing import Optional, Tuple

from .errors import PatternError

@dataclass(frozen=True)
class StatementSpec:
    """One diagram.

    name is the diagram name and, unless stmt is given, also the
    production it is drawn from. Productions listed in inline are
    substituted into the statement first. replace and regreplace are
    (pattern, replacement) pairs applied to the extracted EBNF text in
    order, literal ones first. match and exclude select top-level
    alternatives by regular expression. unlink lists names whose
    cross-reference links are removed from the finished diagram.

    There is no separate descend flag: an overview spec extracts every
    production reachable from its root, any other spec extracts only
    its root.
    """

    name: str
    stmt: Optional[str] = None
    inline: Tuple[str, ...] = ()
    replace: Tuple[Tuple[str, str], ...] = ()
    regreplace: Tuple[Tuple[str, str], ...] = ()
    match: Tuple[str, ...] = ()
    exclude: Tuple[str, ...] = ()
    unlink: Tuple[str, ...] = ()
    nosplit: bool = False
    overview: bool = False

    @property
    def root(self):
        return self.stmt or self.name

    @property
    def descend(self):
        # only the overview follows references into other productions
        return self.overview

    @property
    def output_name(self):
        if self.overview:
            return "grammar"

        return self.name.replace("_stmt", "", 1)

    def apply_replacements(self, text):
        for old, new in self.replace:
            text = text.replace(old, new)

        for pattern, new in self.regreplace:
            try:
                text = re.sub(pattern, new, text)
            except re.error as e:
                raise PatternError(pattern, e)

        return text

GRAMMAR_SPEC = StatementSpec(name="stmt_block", nosplit=True, overview=True)

# TODO: improve SET filtering and SELECT display
SQL_STATEMENTS = (
    StatementSpec(
        name="add_column",
        stmt="alter_table_stmt",
        inline=("alter_table_cmds", "alter_table_cmd"),
        match=(r"'ADD' .* column_def \( ','",),
        regreplace=((r" \( ','.*\)\*", ""),),
    ),
    StatementSpec(
        name="alter_table_stmt",
        inline=("alter_table_cmds", "alter_table_cmd", "column_def", "opt_drop_behavior",
                "alter_column_default", "opt_column", "opt_set_data"),
        nosplit=True,
    ),
    StatementSpec(
        name="begin_transaction",
        stmt="transaction_stmt",
        inline=("opt_transaction", "opt_transaction_mode_list", "transaction_iso_level",
                "transaction_user_priority", "user_priority"),
        match=("'BEGIN'|'START'",),
    ),
    StatementSpec(name="column_def"),
    StatementSpec(
        name="col_qual_list",
        inline=("col_qualification", "col_qualification_elem"),
        replace=(("| 'REFERENCES' qualified_name opt_name_parens", ""),),
    ),
    StatementSpec(
        name="commit_transaction",
        stmt="transaction_stmt",
        inline=("opt_transaction",),
        match=("'COMMIT'|'END'",),
    ),
    StatementSpec(
        name="create_database_stmt",
        inline=("opt_encoding_clause",),
        replace=(("'SCONST'", "encoding"),),
        unlink=("name", "encoding"),
    ),
    StatementSpec(
        name="create_index_stmt",
        inline=("opt_storing", "storing", "opt_unique", "opt_name", "index_params", "index_elem",
                "opt_asc_desc", "name_list"),
        replace=(
            ("'INDEX' ( name", "'INDEX' ( index_name"),
            ("'EXISTS' name", "'EXISTS' index_name"),
            ("qualified_name", "table_name"),
            ("',' name", "',' column_name"),
            ("( name (", "( column_name ("),
        ),
        unlink=("index_name", "table_name", "column_name"),
        nosplit=True,
    ),
    StatementSpec(
        name="create_table_stmt",
        inline=("opt_table_elem_list", "table_elem_list", "table_elem"),
    ),
    StatementSpec(
        name="delete_stmt",
        inline=("relation_expr_opt_alias", "where_clause", "returning_clause", "target_list",
                "target_elem"),
    ),
    StatementSpec(
        name="drop_database",
        stmt="drop_stmt",
        match=("'DROP' 'DATABASE'",),
    ),
    StatementSpec(
        name="drop_index",
        stmt="drop_stmt",
        match=("'DROP' 'INDEX'",),
        inline=("opt_drop_behavior", "table_name_with_index_list", "table_name_with_index"),
        replace=(("qualified_name", "table_name"), ("'@' name", "'@' index_name")),
        unlink=("table_name", "index_name"),
    ),
    StatementSpec(
        name="drop_stmt",
        inline=("table_name_list", "any_name", "qualified_name_list", "qualified_name"),
    ),
    StatementSpec(
        name="drop_table",
        stmt="drop_stmt",
        match=("'DROP' 'TABLE'",),
    ),
    StatementSpec(name="explain_stmt", inline=("explainable_stmt", "explain_option_list")),
    StatementSpec(name="family_def", inline=("opt_name", "name_list")),
    StatementSpec(
        name="grant_stmt",
        inline=("privileges", "privilege_list", "privilege", "privilege_target", "grantee_list",
                "table_pattern_list", "name_list"),
        replace=(
            ("table_pattern", "table_name"),
            ("'DATABASE' ( name ( ',' name )* )", "'DATABASE' ( database_name ( ',' database_name )* )"),
            ("'TO' ( name ( ',' name )* )", "'TO' ( user_name ( ',' user_name )* )"),
        ),
        unlink=("table_name", "database_name", "user_name"),
        nosplit=True,
    ),
    StatementSpec(name="index_def", inline=("opt_storing", "storing", "index_params", "opt_name")),
    StatementSpec(
        name="insert_stmt",
        inline=("insert_target", "insert_rest", "returning_clause"),
        match=("'INSERT'",),
    ),
    StatementSpec(name="iso_level"),
    StatementSpec(name="release_savepoint", stmt="release_stmt", inline=("savepoint_name",)),
    StatementSpec(
        name="rename_column",
        stmt="rename_stmt",
        match=("'ALTER' 'TABLE' .* 'RENAME' opt_column",),
    ),
    StatementSpec(name="rename_database", stmt="rename_stmt", match=("'ALTER' 'DATABASE'",)),
    StatementSpec(name="rename_index", stmt="rename_stmt", match=("'ALTER' 'INDEX'",)),
    StatementSpec(name="rename_table", stmt="rename_stmt", match=("'ALTER' 'TABLE' .* 'RENAME' 'TO'",)),
    StatementSpec(
        name="revoke_stmt",
        inline=("privileges", "privilege_list", "privilege", "privilege_target", "grantee_list"),
    ),
    StatementSpec(
        name="rollback_transaction",
        stmt="transaction_stmt",
        inline=("opt_transaction",),
        match=("'ROLLBACK'",),
    ),
    StatementSpec(name="savepoint_stmt", inline=("savepoint_name",)),
    StatementSpec(
        name="select_stmt",
        inline=("select_no_parens", "simple_select", "opt_sort_clause", "select_limit"),
        nosplit=True,
    ),
    StatementSpec(
        name="set_time_zone",
        stmt="set_stmt",
        inline=("set_rest", "set_rest_more", "generic_set"),
        match=("'SET' 'TIME'",),
    ),
    StatementSpec(
        name="set_database",
        stmt="set_stmt",
        inline=("set_rest", "set_rest_more", "generic_set"),
        match=("'SET' var_name .* var_list",),
        replace=(("var_name", "'DATABASE'"), ("var_list", "database_name")),
        unlink=("database_name",),
    ),
    StatementSpec(
        name="set_transaction",
        stmt="set_stmt",
        inline=("set_rest", "transaction_mode_list", "transaction_iso_level",
                "transaction_user_priority"),
        replace=((" | set_rest_more", ""),),
        match=("'TRANSACTION'",),
    ),
    StatementSpec(
        name="show_columns",
        stmt="show_stmt",
        match=("'SHOW' 'COLUMNS'",),
        replace=(("var_name", "table_name"),),
        unlink=("table_name",),
    ),
    StatementSpec(
        name="show_constraints",
        stmt="show_stmt",
        match=("'SHOW' 'CONSTRAINTS'",),
        replace=(("var_name", "table_name"),),
        unlink=("table_name",),
    ),
    StatementSpec(
        name="show_create_table",
        stmt="show_stmt",
        match=("'SHOW' 'CREATE' 'TABLE'",),
        replace=(("var_name", "table_name"),),
        unlink=("table_name",),
    ),
    StatementSpec(name="show_databases", stmt="show_stmt", match=("'SHOW' 'DATABASES'",)),
    StatementSpec(
        name="show_grants",
        stmt="show_stmt",
        inline=("on_privilege_target_clause", "privilege_target", "for_grantee_clause",
                "grantee_list", "table_pattern_list", "name_list"),
        match=("'SHOW' 'GRANTS'",),
        replace=(
            ("table_pattern", "table_name"),
            ("'DATABASE' name ( ',' name )*", "'DATABASE' database_name ( ',' database_name )*"),
            ("'FOR' name ( ',' name )*", "'FOR' user_name ( ',' user_name )*"),
        ),
        unlink=("table_name", "database_name", "user_name"),
    ),
    StatementSpec(
        name="show_index",
        stmt="show_stmt",
        match=("'SHOW' 'INDEX'",),
        replace=(("var_name", "table_name"),),
        unlink=("table_name",),
    ),
    StatementSpec(name="show_keys", stmt="show_stmt", match=("'SHOW' 'KEYS'",)),
    StatementSpec(name="show_tables", stmt="show_stmt", match=("'SHOW' 'TABLES'",)),
    StatementSpec(name="show_timezone", stmt="show_stmt", match=("'SHOW' 'TIME' 'ZONE'",)),
    StatementSpec(name="show_transaction", stmt="show_stmt", match=("'SHOW' 'TRANSACTION'",)),
    StatementSpec(name="table_constraint", inline=("constraint_elem", "opt_storing", "storing")),
    StatementSpec(
        name="truncate_stmt",
        inline=("opt_table", "relation_expr_list", "relation_expr", "opt_drop_behavior"),
        replace=(
            ("'ONLY' '(' qualified_name ')'", ""),
            ("'ONLY' qualified_name", ""),
            ("qualified_name", "table_name"),
            ("'*'", ""),
            ("'CASCADE'", ""),
            ("'RESTRICT'", ""),
        ),
        unlink=("table_name",),
    ),
    StatementSpec(
        name="update_stmt",
        inline=("relation_expr_opt_alias", "set_clause_list", "set_clause", "single_set_clause",
                "multiple_set_clause", "ctext_row", "ctext_expr_list", "ctext_expr", "from_clause",
                "from_list", "where_clause", "returning_clause"),
    ),
    StatementSpec(
        name="upsert_stmt",
        stmt="insert_stmt",
        inline=("insert_target", "insert_rest", "returning_clause"),
        match=("'UPSERT'",),
    ),
)

def find_spec(name, specs = SQL_STATEMENTS):
    for s in specs:
        if s.name == name:
            return s

    return None
