import json
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest


def _add_src_to_path() -> None:
    root = Path(__file__).resolve().parents[1]
    src_path = root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


_add_src_to_path()


BundleFactory = Callable[..., Path]


@pytest.fixture
def make_bundle() -> BundleFactory:
    """Return a factory creating ``<name>.vst3`` bundles with module info."""

    def _make(
        parent: Path,
        name: str,
        classes: list[dict[str, Any]] | None,
        factory_vendor: str = "Acme",
    ) -> Path:
        bundle = parent / f"{name}.vst3"
        binary = bundle / "Contents" / "x86_64-linux" / f"{name}.so"
        binary.parent.mkdir(parents=True, exist_ok=True)
        binary.write_bytes(b"\x7fELF")
        if classes is not None:
            info_path = bundle / "Contents" / "Resources" / "moduleinfo.json"
            info_path.parent.mkdir(parents=True, exist_ok=True)
            info_path.write_text(
                json.dumps(
                    {
                        "Name": name,
                        "Version": "1.0.0",
                        "Factory Info": {"Vendor": factory_vendor},
                        "Classes": classes,
                    }
                ),
                encoding="utf-8",
            )
        return bundle

    return _make
