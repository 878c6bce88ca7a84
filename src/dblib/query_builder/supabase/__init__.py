"""Supabase/PostgreSQL query builder."""

from dblib.query_builder.supabase.filters import SupabaseQueryBuilder, to_array_literal

__all__ = [
    "SupabaseQueryBuilder",
    "to_array_literal",
]
