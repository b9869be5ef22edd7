"""Addressing of a single script execution within the result tree."""

from collections.abc import Sequence
from dataclasses import dataclass


@dataclass(frozen=True, kw_only=True)
class RunDescriptor:
    """Identifies one logical test execution.

    suite_name may be a dotted namespace path ("A.B.C"); each segment becomes
    a nested scope in the result tree, the first one being the root.
    """

    suite_name: str
    fixture_name: str
    test_name: str

    def __post_init__(self) -> None:
        for field_name in ("suite_name", "fixture_name", "test_name"):
            if not getattr(self, field_name):
                raise ValueError(f"RunDescriptor.{field_name} must not be empty")

    @classmethod
    def parse(cls, path: str) -> "RunDescriptor":
        """Split "Suite[.Namespace...].Fixture.Test" into a descriptor."""
        parts = path.split(".")
        if len(parts) < 3:
            raise ValueError(
                f"Expected at least 'suite.fixture.test', got {path!r}"
            )
        return cls(
            suite_name=".".join(parts[:-2]),
            fixture_name=parts[-2],
            test_name=parts[-1],
        )

    @property
    def namespace_parts(self) -> Sequence[str]:
        """Segments of the suite namespace path."""
        return self.suite_name.split(".")

    @property
    def fixture_path(self) -> str:
        """Dotted path of the fixture scope."""
        return f"{self.suite_name}.{self.fixture_name}"

    @property
    def full_name(self) -> str:
        """Canonical dotted key used for timers and tree lookup."""
        return f"{self.suite_name}.{self.fixture_name}.{self.test_name}"

    def __str__(self) -> str:
        return self.full_name
