import sys
from pathlib import Path
import pytest
import warnings


warnings.filterwarnings(
    "ignore",
    message=r"The \(path: py\.path\.local\) argument is deprecated",
    category=pytest.PytestRemovedIn9Warning,
)

project_root = Path(__file__).resolve().parents[1]
src_path = project_root / "src"
tests_path = project_root / "tests"
for path in (src_path, tests_path):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

if "movegrade" in sys.modules:
    for name in list(sys.modules):
        if name == "movegrade" or name.startswith("movegrade."):
            del sys.modules[name]
