"""Action dispatch source package.

This package contains:
- config: Configuration loading and management
- dispatch: Typed action registry, argument coercion and invocation
"""

from __future__ import annotations

__all__: list[str] = []
