"""Native builder APIs."""

from .autotools import DEFAULT_CONFIGURE_FLAGS, AutotoolsBuilder
from .base import BuildArtifact, Builder, BuildSpec
from .smoke import smoke_test

__all__ = [
    "DEFAULT_CONFIGURE_FLAGS",
    "AutotoolsBuilder",
    "BuildArtifact",
    "BuildSpec",
    "Builder",
    "smoke_test",
]
