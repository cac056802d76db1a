# tests/conftest.py
"""Shared test fixtures and helpers.

This module provides fixtures for building engines that never touch the
real working directory.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/
"""

import os
from pathlib import Path
from typing import Any

import pytest
from hypothesis import Phase, Verbosity, settings

from sourcebit.engine.orchestrator import Sourcebit

# =============================================================================
# Hypothesis Configuration
# =============================================================================

# CI profile: Fast tests for continuous integration
settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)

# Nightly profile: Thorough testing for scheduled runs
settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Debug profile: Minimal examples with verbose output for debugging
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Load profile from environment, default to "ci"
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


@pytest.fixture
def cache_path(tmp_path: Path) -> Path:
    """Location for a cache file inside the test's temp directory."""
    return tmp_path / ".sourcebit-cache.json"


@pytest.fixture
def engine_factory(tmp_path: Path, cache_path: Path):
    """Create engines rooted in tmp_path with caching pointed at cache_path.

    Caching is disabled unless the test asks for it.
    """

    def _make(runtime_parameters: dict[str, Any] | None = None, **kwargs: Any) -> Sourcebit:
        params = {"cache": False, "cache_path": cache_path, **(runtime_parameters or {})}
        kwargs.setdefault("base_dir", tmp_path)
        return Sourcebit(params, **kwargs)

    return _make
