"""
Import-boundary enforcement for the layered packages.

1. Kernel purity       -- statement_kernel/** may not import the config,
                         engine or converter layers.
2. Config direction    -- statement_config/** may import the kernel only.
3. Engine direction    -- statement_engines/** may not import converters
                         nor the config loader internals.
4. No impure calls     -- engines and converters may not read the wall
                         clock or the environment.
5. No I/O in converters -- statement_converters/** may not import file,
                         network or process modules.

All scanning is done via AST -- these tests are read-only.
"""

import ast
import glob
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[2]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _python_files(root: str) -> list[str]:
    """Return all .py files under *root*, sorted for deterministic order."""
    return sorted(glob.glob(f"{REPO_ROOT / root}/**/*.py", recursive=True))


def _relative(filepath: str) -> str:
    return Path(filepath).relative_to(REPO_ROOT).as_posix()


def _parse(filepath: str) -> ast.AST | None:
    try:
        return ast.parse(Path(filepath).read_text(), filename=filepath)
    except (SyntaxError, UnicodeDecodeError):
        return None


def _extract_imports(filepath: str) -> list[tuple[int, str]]:
    """Return (line_number, module_string) for every import in *filepath*."""
    tree = _parse(filepath)
    if tree is None:
        return []

    results: list[tuple[int, str]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                results.append((node.lineno, alias.name))
        elif isinstance(node, ast.ImportFrom):
            if node.module:
                results.append((node.lineno, node.module))
    return results


def _matches_any(module: str, prefixes: tuple[str, ...]) -> bool:
    """True if *module* equals or is a child of any prefix."""
    for prefix in prefixes:
        if module == prefix or module.startswith(f"{prefix}."):
            return True
    return False


def _extract_attribute_calls(filepath: str) -> list[tuple[int, str]]:
    """Return (line_number, 'receiver.attr') for two-level ast.Attribute nodes."""
    tree = _parse(filepath)
    if tree is None:
        return []

    results: list[tuple[int, str]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Attribute) and isinstance(node.value, ast.Name):
            results.append((node.lineno, f"{node.value.id}.{node.attr}"))
    return results


def _violations(root: str, forbidden: tuple[str, ...]) -> list[str]:
    found: list[str] = []
    for filepath in _python_files(root):
        for lineno, module in _extract_imports(filepath):
            if _matches_any(module, forbidden):
                found.append(f"  {_relative(filepath)}:{lineno} imports '{module}'")
    return found


# ---------------------------------------------------------------------------
# 1-3. TestDependencyDirection
# ---------------------------------------------------------------------------

class TestDependencyDirection:
    """Verify the dependency DAG:

    Allowed edges (→ means "may import"):
        statement_converters → statement_engines, statement_config,
                               statement_kernel
        statement_engines    → statement_config (package API),
                               statement_kernel
        statement_config     → statement_kernel
        statement_kernel     → (stdlib only + internal)
    """

    RULES: list[tuple[str, tuple[str, ...]]] = [
        (
            "statement_kernel",
            ("statement_config", "statement_engines", "statement_converters"),
        ),
        (
            "statement_config",
            ("statement_engines", "statement_converters"),
        ),
        (
            "statement_engines",
            ("statement_converters", "statement_config.loader"),
        ),
    ]

    def test_packages_exist(self):
        for source_root, _ in self.RULES:
            assert _python_files(source_root), f"{source_root} has no modules"

    def test_dependency_dag(self):
        violations: list[str] = []
        for source_root, forbidden in self.RULES:
            violations.extend(
                f"[{source_root}]{line}" for line in _violations(source_root, forbidden)
            )

        assert not violations, (
            "Dependency direction violation -- the following imports break "
            "the layered architecture DAG:\n" + "\n".join(violations)
        )

    def test_converters_use_config_package_api(self):
        violations = _violations("statement_converters", ("statement_config.loader",))
        assert not violations, (
            "Converters must import tables through statement_config, not its "
            "loader:\n" + "\n".join(violations)
        )


# ---------------------------------------------------------------------------
# 4. TestNoImpureFunctions
# ---------------------------------------------------------------------------

class TestNoImpureFunctions:
    """Engines and converters may not call wall-clock or environment functions.

    Forbidden:
        datetime.now, datetime.utcnow, date.today,
        time.time, os.environ, os.getenv

    Allowed (observational-only):
        time.monotonic
    """

    FORBIDDEN_CALLS = frozenset({
        "datetime.now",
        "datetime.utcnow",
        "date.today",
        "time.time",
        "os.environ",
        "os.getenv",
    })

    def test_no_impure_calls(self):
        violations: list[str] = []

        for root in ("statement_engines", "statement_converters"):
            for filepath in _python_files(root):
                for lineno, qualname in _extract_attribute_calls(filepath):
                    if qualname in self.FORBIDDEN_CALLS:
                        violations.append(
                            f"  {_relative(filepath)}:{lineno} calls '{qualname}'"
                        )

        assert not violations, (
            "Impurity violation -- conversions must not read the clock or the "
            "environment. Pass timestamps through ConversionOptions:\n"
            + "\n".join(violations)
        )


# ---------------------------------------------------------------------------
# 5. TestConverterNoIO
# ---------------------------------------------------------------------------

class TestConverterNoIO:
    """statement_converters/** works on in-memory documents only."""

    FORBIDDEN_PREFIXES = (
        "socket",
        "subprocess",
        "urllib",
        "http",
        "shutil",
        "yaml",
        "sqlite3",
    )

    def test_converter_files_have_no_io_imports(self):
        violations = _violations("statement_converters", self.FORBIDDEN_PREFIXES)
        assert not violations, (
            "Converter purity violation -- statement_converters/** must not "
            "import I/O modules:\n" + "\n".join(violations)
        )
