"""
Static checks over generated code bundles.

Pure, deterministic scanners. They never execute code; each returns a
CheckResult that can be merged into a phase verification result.
"""

import ast
import json
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from missionguard.domain.models import CheckResult, Issue, Severity

CODE_SUFFIXES = (".py", ".js", ".jsx", ".ts", ".tsx", ".json")


@dataclass(frozen=True)
class ScanRule:
    """A content pattern that yields one issue per matching file."""

    name: str
    pattern: re.Pattern[str]
    severity: Severity
    message: str


SECURITY_RULES: tuple[ScanRule, ...] = (
    ScanRule(
        "hardcoded_secret",
        re.compile(
            r"(api[_-]?key|secret|password|token)\s*[:=]\s*['\"][^'\"]+['\"]",
            re.IGNORECASE,
        ),
        Severity.CRITICAL,
        "Hardcoded secret; move it to an environment variable",
    ),
    ScanRule(
        "dynamic_eval",
        re.compile(r"\beval\(|\bnew Function\(|\bexec\("),
        Severity.CRITICAL,
        "Dynamic code evaluation",
    ),
    ScanRule(
        "raw_sql",
        re.compile(r"\$queryRaw|\braw\(|execute\(\s*f['\"]"),
        Severity.HIGH,
        "Raw SQL query; use parameterized queries",
    ),
    ScanRule(
        "unsafe_html",
        re.compile(r"dangerouslySetInnerHTML|\.innerHTML\s*="),
        Severity.HIGH,
        "Unsanitized HTML rendering (XSS)",
    ),
    ScanRule(
        "weak_hash",
        re.compile(r"\bmd5\b|\bsha1\b", re.IGNORECASE),
        Severity.MEDIUM,
        "Weak hash algorithm; use SHA-256 or stronger",
    ),
    ScanRule(
        "cors_wildcard",
        re.compile(r"origin\s*[:=]\s*['\"]\*['\"]"),
        Severity.MEDIUM,
        "CORS allows every origin",
    ),
    ScanRule(
        "console_log",
        re.compile(r"\bconsole\.log\("),
        Severity.LOW,
        "console.log left in production code",
    ),
)


def bundle_files(*bundles: Any) -> list[tuple[str, str]]:
    """Flatten code bundle payloads into (path, content) pairs."""
    files: list[tuple[str, str]] = []
    for bundle in bundles:
        if not isinstance(bundle, dict):
            continue
        for entry in bundle.get("files", ()):
            files.append((entry["path"], entry["content"]))
    return files


def _is_scannable(path: str) -> bool:
    return path.endswith(CODE_SUFFIXES) and ".env" not in path


def security_scan(
    files: Iterable[tuple[str, str]],
    rules: tuple[ScanRule, ...] = SECURITY_RULES,
) -> CheckResult:
    """Run pattern rules over source files.

    Test files are exempt from the ``console_log`` rule.
    """
    issues: list[Issue] = []
    for path, content in files:
        if not _is_scannable(path):
            continue
        for rule in rules:
            if rule.name == "console_log" and "test" in path:
                continue
            if rule.pattern.search(content):
                issues.append(Issue(rule.severity, f"{rule.message} ({path})", path))
    blocking = any(i.severity.is_blocking for i in issues)
    status = "fail" if blocking else "pass"
    return CheckResult("static_security", status, tuple(issues))


def syntax_check(files: Iterable[tuple[str, str]]) -> CheckResult:
    """Parse Python and JSON sources; report every file that does not parse."""
    issues: list[Issue] = []
    for path, content in files:
        if path.endswith(".py"):
            try:
                ast.parse(content)
            except SyntaxError as e:
                issues.append(
                    Issue(Severity.HIGH, f"Syntax error in {path}: {e.msg}", path)
                )
        elif path.endswith(".json"):
            try:
                json.loads(content)
            except ValueError as e:
                issues.append(
                    Issue(Severity.HIGH, f"Invalid JSON in {path}: {e}", path)
                )
    return CheckResult("syntax", "fail" if issues else "pass", tuple(issues))
