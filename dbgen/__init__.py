"""Byte strings, SQL/CSV value formatting, row partitioning and argument specifications for generating database content."""

__version__ = "0.8.0"