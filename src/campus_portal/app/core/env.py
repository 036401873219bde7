from __future__ import annotations

import logging
import os
from enum import StrEnum
from functools import cache
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Env(StrEnum):
    LOCAL = "local"
    DEV = "dev"
    TEST = "test"
    PROD = "prod"


# Spellings seen in deploy manifests, all lower-case
_ALIASES: dict[str, Env] = {
    **{e.value: e for e in Env},
    "development": Env.DEV,
    "staging": Env.DEV,
    "testing": Env.TEST,
    "ci": Env.TEST,
    "production": Env.PROD,
}


def resolve_env(raw: str | None) -> Env:
    """Map an ``APP_ENV`` value to an :class:`Env`; blank or unknown means LOCAL."""
    key = (raw or "").strip().lower()
    if not key:
        return Env.LOCAL
    env = _ALIASES.get(key)
    if env is None:
        logger.warning("Unrecognized APP_ENV %r, running as 'local'", raw)
        return Env.LOCAL
    return env


@cache
def get_env() -> Env:
    return resolve_env(os.getenv("APP_ENV"))


def is_prod(env: Env | None = None) -> bool:
    return (env or get_env()) is Env.PROD


def pick(*, prod: T, nonprod: T, test: T | None = None, env: Env | None = None) -> T:
    """Per-environment default, e.g. ``pick(prod="INFO", nonprod="DEBUG")``.

    ``test`` falls back to ``nonprod`` when omitted.
    """
    env = env or get_env()
    if env is Env.PROD:
        return prod
    if env is Env.TEST and test is not None:
        return test
    return nonprod
