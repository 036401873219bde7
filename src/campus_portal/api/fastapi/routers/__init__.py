from __future__ import annotations

import importlib
import logging
import pkgutil
from types import ModuleType
from typing import Optional

from fastapi import FastAPI

logger = logging.getLogger(__name__)


def _should_skip_module(module_name: str, exclude: set[str]) -> bool:
    # private helpers (_crud) and explicitly excluded modules are not routers
    last_segment = module_name.rsplit(".", 1)[-1]
    return last_segment.startswith("_") or last_segment in exclude


def register_all_routers(
        app: FastAPI,
        *,
        base_package: Optional[str] = None,
        prefix: str = "",
        exclude: Optional[set[str]] = None,
) -> list[str]:
    """
    Include every module-level ``router`` found under ``base_package``.

    - Modules whose name starts with ``_`` are skipped.
    - ``exclude`` drops modules by their final name segment (e.g. ``{"users"}``).
    - A module may set ``ROUTER_PREFIX`` / ``ROUTER_TAG`` to override its mount.

    Returns the names of the modules that were included. Import errors propagate:
    a router that cannot be imported is a broken deployment.
    """
    base_package = base_package or __name__
    package_module: ModuleType = importlib.import_module(base_package)
    if not hasattr(package_module, "__path__"):
        raise RuntimeError(f"Provided base_package '{base_package}' is not a package (no __path__).")

    included: list[str] = []
    for _, module_name, _ in sorted(
            pkgutil.iter_modules(package_module.__path__, prefix=f"{base_package}."),
            key=lambda item: item[1],
    ):
        if _should_skip_module(module_name, exclude or set()):
            continue
        module = importlib.import_module(module_name)
        router = getattr(module, "router", None)
        if router is None:
            continue
        include_kwargs: dict = {"prefix": prefix.rstrip("/") + getattr(module, "ROUTER_PREFIX", "")}
        router_tag = getattr(module, "ROUTER_TAG", None)
        if router_tag:
            include_kwargs["tags"] = [router_tag]
        app.include_router(router, **include_kwargs)
        included.append(module_name)
        logger.debug("Included router from module: %s (prefix=%s)", module_name, include_kwargs["prefix"])
    return included
