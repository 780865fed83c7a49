"""
Lead import module for Juno Outreach.

Parses comma, semicolon or tab separated lead spreadsheets into RawRecords.
"""

from .table_parser import (
    RawRecord,
    SchemaError,
    detect_delimiter,
    tokenize,
    parse_table,
    format_table
)

__all__ = [
    'RawRecord',
    'SchemaError',
    'detect_delimiter',
    'tokenize',
    'parse_table',
    'format_table'
]
