"""ORM models (relational record store only)."""

from .repair import Repair
