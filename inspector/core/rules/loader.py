from __future__ import annotations

import hashlib
import importlib
import importlib.util
import sys
from pathlib import Path
from types import ModuleType
from typing import Any, Optional, Sequence


def load_module_from_file(module_path: Path) -> ModuleType:
    module_path = Path(module_path).resolve()

    # module name must be deterministic across interpreter restarts
    path_key = str(module_path).replace("\\", "/").lower().encode("utf-8")
    path_hash = hashlib.sha1(path_key).hexdigest()[:16]
    module_name = f"inspector_user_{module_path.stem}_{path_hash}"

    spec = importlib.util.spec_from_file_location(module_name, str(module_path))
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot create module spec for {module_path}")

    mod = importlib.util.module_from_spec(spec)

    # register the module BEFORE exec_module (dataclasses needs this)
    sys.modules[module_name] = mod

    try:
        spec.loader.exec_module(mod)  # type: ignore[attr-defined]
    except Exception:
        sys.modules.pop(module_name, None)
        raise

    return mod


def load_symbol(
    reference: str,
    *,
    symbols: Sequence[str],
    base_dir: Optional[Path] = None,
) -> Any:
    """
    Load a user-supplied object.

    ``reference`` is either a Python file (relative to ``base_dir``) or an
    importable module, optionally suffixed with ``:attribute``. Without an
    explicit attribute the first of ``symbols`` present on the module wins.

    Raises ImportError / AttributeError when nothing can be loaded.
    """
    target, _, attr = reference.partition(":")
    target = target.strip()
    attr = attr.strip()

    candidate = Path(target)
    if not candidate.is_absolute():
        candidate = (base_dir or Path.cwd()) / candidate

    if candidate.suffix == ".py" or candidate.is_file():
        if not candidate.is_file():
            raise ImportError(f"No such file: {candidate}")
        mod = load_module_from_file(candidate)
    else:
        mod = importlib.import_module(target)

    names = [attr] if attr else list(symbols)
    for name in names:
        obj = getattr(mod, name, None)
        if obj is not None:
            return obj

    raise AttributeError(f"{reference} must define one of: {', '.join(names)}")
