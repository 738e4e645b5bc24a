# src/stackerrors/types.py
# Copyright (c) stackerrors.
# SPDX-License-Identifier: MIT
"""Project-wide metadata typing helpers.

These aliases model the values that may be attached to an error as metadata.
The set is closed and JSON-compatible so metadata can be rendered by log
formatters and reporting collaborators without custom encoders.
"""

from __future__ import annotations

from typing import TypeAlias

MetadataPrimitive: TypeAlias = None | bool | int | float | str
MetadataValue: TypeAlias = (
    "MetadataPrimitive | list[MetadataValue] | dict[str, MetadataValue]"
)
Metadata: TypeAlias = "dict[str, MetadataValue]"

__all__ = ["Metadata", "MetadataPrimitive", "MetadataValue"]
