"""Symbol normalization for matching profiler names against analysis names.

The branch profiler reports glibc symbols under their internal aliases
(`__GI___open64`, `__libc_malloc`, `memcpy@GLIBC_2.14`) while the points-to
analysis sees the public names. Normalization erases that decoration so both
sides compare equal. The rule table is a maintained heuristic: extend
`AFFIX_RULES` when a new decoration pattern turns up.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

DOUBLE_UNDERSCORE = "__"


@dataclass(frozen=True)
class AffixRule:
    kind: str  # "prefix", "suffix" or "version"
    text: str = ""

    def strip(self, name: str) -> str | None:
        if self.kind == "prefix":
            if name.startswith(self.text):
                return name[len(self.text):]
            return None
        if self.kind == "suffix":
            if name.endswith(self.text):
                return name[: -len(self.text)]
            return None
        if self.kind == "version":
            at = name.find("@")
            if at >= 0:
                return name[:at]
            return None
        raise ValueError(f"Unsupported affix rule kind: {self.kind}")


# Priority order; the first rule that matches wins for a single pass.
AFFIX_RULES: tuple[AffixRule, ...] = (
    AffixRule("suffix", "64"),  # large-file-support variants (open64, stat64)
    AffixRule("prefix", "GI___"),
    AffixRule("prefix", "GI__"),
    AffixRule("prefix", "GI_libc_"),
    AffixRule("prefix", "GI_"),
    AffixRule("prefix", "libc_"),
    AffixRule("version", "@"),
)


def strip_affix(name: str, rules: Iterable[AffixRule] = AFFIX_RULES) -> str:
    """Run one normalization pass: drop every `__`, then the first matching affix."""
    base = name.replace(DOUBLE_UNDERSCORE, "")
    for rule in rules:
        stripped = rule.strip(base)
        if stripped is not None:
            return stripped
    return base


def normalize_symbol(name: str, rules: Iterable[AffixRule] = AFFIX_RULES) -> str:
    """Return the canonical form of `name`.

    Passes repeat until the name stops changing, so the result is a fixed
    point: `normalize_symbol(normalize_symbol(s)) == normalize_symbol(s)`.
    Every pass that changes the name makes it shorter, so this terminates.
    """
    rules = tuple(rules)
    current = name
    while True:
        stripped = strip_affix(current, rules)
        if stripped == current:
            return current
        current = stripped
