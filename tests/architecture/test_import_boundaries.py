"""
Import-boundary enforcement.

1. Domain purity     -- lot_kernel/domain/** may not import the ORM, the
                        database layer, services, selectors or outer layers.
2. Kernel isolation  -- lot_kernel/** may not import lot_config or lot_api.
3. Config isolation  -- lot_config/** may not import lot_api.

Imports inside ``if TYPE_CHECKING:`` blocks are annotations only and are
ignored.  All scanning is done via AST; these tests are read-only.
"""

import ast
import glob
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]


def _python_files(package: str) -> list[Path]:
    return sorted(Path(p) for p in glob.glob(f"{ROOT / package}/**/*.py", recursive=True))


def _is_type_checking_block(node: ast.AST) -> bool:
    if not isinstance(node, ast.If):
        return False
    test = node.test
    return (isinstance(test, ast.Name) and test.id == "TYPE_CHECKING") or (
        isinstance(test, ast.Attribute) and test.attr == "TYPE_CHECKING"
    )


def _extract_imports(filepath: Path) -> list[tuple[int, str]]:
    """Return (line_number, module) for every runtime import in *filepath*."""
    tree = ast.parse(filepath.read_text(), filename=str(filepath))
    skipped: set[int] = set()
    for node in ast.walk(tree):
        if _is_type_checking_block(node):
            for child in ast.walk(node):
                skipped.add(id(child))

    results: list[tuple[int, str]] = []
    for node in ast.walk(tree):
        if id(node) in skipped:
            continue
        if isinstance(node, ast.Import):
            for alias in node.names:
                results.append((node.lineno, alias.name))
        elif isinstance(node, ast.ImportFrom) and node.module:
            results.append((node.lineno, node.module))
    return results


def _matches_any(module: str, prefixes: tuple[str, ...]) -> bool:
    return any(module == prefix or module.startswith(f"{prefix}.") for prefix in prefixes)


def _violations(package: str, forbidden: tuple[str, ...]) -> list[str]:
    found = []
    for filepath in _python_files(package):
        for lineno, module in _extract_imports(filepath):
            if _matches_any(module, forbidden):
                found.append(f"  {filepath.relative_to(ROOT)}:{lineno} imports '{module}'")
    return found


class TestDomainPurity:
    FORBIDDEN_PREFIXES = (
        "sqlalchemy",
        "psycopg2",
        "sqlite3",
        "fastapi",
        "yaml",
        "lot_kernel.db",
        "lot_kernel.models",
        "lot_kernel.services",
        "lot_kernel.selectors",
        "lot_config",
        "lot_api",
    )

    def test_domain_has_no_forbidden_imports(self):
        violations = _violations("lot_kernel/domain", self.FORBIDDEN_PREFIXES)

        assert not violations, (
            "Domain purity violation -- lot_kernel/domain/** must stay free of "
            "I/O layers:\n" + "\n".join(violations)
        )


class TestKernelIsolation:
    def test_kernel_does_not_import_outer_layers(self):
        violations = _violations("lot_kernel", ("lot_config", "lot_api"))

        assert not violations, "\n".join(violations)

    def test_config_does_not_import_api(self):
        violations = _violations("lot_config", ("lot_api",))

        assert not violations, "\n".join(violations)


def test_scanner_sees_the_packages():
    assert _python_files("lot_kernel/domain")
    assert _python_files("lot_config")
