"""Regression tests for importing the store without the web stack."""

from __future__ import annotations

import importlib
import sys
import types
import unittest
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


class StoreImportTests(unittest.TestCase):
    def tearDown(self) -> None:
        self._clear_package_modules()

    @staticmethod
    def _clear_package_modules() -> None:
        for name in [m for m in list(sys.modules.keys()) if m == "jokeapi" or m.startswith("jokeapi.")]:
            sys.modules.pop(name, None)

    def test_import_store_without_fastapi(self) -> None:
        """Importing jokeapi.store should succeed even if FastAPI is unavailable."""

        self._clear_package_modules()

        fastapi_module: types.ModuleType | None = sys.modules.pop("fastapi", None)
        sys.modules["fastapi"] = None
        try:
            store_module = importlib.import_module("jokeapi.store")
            self.assertTrue(hasattr(store_module, "JokeStore"))

            package = sys.modules.get("jokeapi")
            self.assertIsNotNone(package)
            self.assertTrue(hasattr(package, "JokeStore"))
            self.assertTrue(callable(package.create_app))

            with self.assertRaises(ImportError):
                package.create_app()
        finally:
            sys.modules.pop("fastapi", None)
            if fastapi_module is not None:
                sys.modules["fastapi"] = fastapi_module


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
