"""
Модуль для загрузки и валидации конфигурации seoq.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Literal, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from seoq import __version__

LIMIT_MIN = 1
LIMIT_MAX = 100
MAX_ISSUES_MIN = 1
MAX_ISSUES_MAX = 50

API_KEY_ENV = "OPENAI_API_KEY"

FetchMode = Literal["browser", "http"]


class SeoqConfig(BaseModel):
    """Конфигурация одного запуска seoq."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    openai_api_key: Optional[str] = Field(None, description="Ключ OpenAI (по умолчанию из OPENAI_API_KEY).")
    model: str = Field("gpt-5.2", min_length=1, description="Модель для структурированного анализа.")
    timeout: float = Field(30.0, gt=0, description="Таймаут HTTP-запроса (секунд).")
    browser_timeout: float = Field(30.0, gt=0, description="Таймаут навигации браузера (секунд).")
    user_agent: str = Field(f"seoq/{__version__}", min_length=1, description="Заголовок User-Agent.")
    retry_times: int = Field(2, ge=0, description="Число повторных попыток при 5xx и 429.")
    concurrency: int = Field(1, ge=1, description="Число страниц, анализируемых одновременно.")
    max_issues: int = Field(3, ge=MAX_ISSUES_MIN, le=MAX_ISSUES_MAX, description="Макс. число issues на страницу.")
    sitemap_limit: int = Field(25, ge=LIMIT_MIN, le=LIMIT_MAX, description="Макс. число URL из sitemap.")
    fetch_mode: FetchMode = Field("browser", description="Способ загрузки страниц: browser или http.")

    @field_validator("openai_api_key", mode="before")
    def _blank_key_is_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="before")
    @classmethod
    def _key_from_environment(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("openai_api_key"):
            data = {**data, "openai_api_key": os.environ.get(API_KEY_ENV)}
        return data

    def masked(self) -> dict[str, Any]:
        """Словарь для вывода в консоль: ключ API скрыт."""
        data = self.model_dump()
        key = data.get("openai_api_key")
        if key:
            data["openai_api_key"] = f"{key[:3]}…{key[-4:]}" if len(key) > 8 else "***"
        return data


_DEFAULT_CFG = Path("seoq.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None] = None) -> SeoqConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект SeoqConfig.
    Без явного пути использует ./seoq.yaml, а если его нет, значения по умолчанию.
    Явно указанный, но отсутствующий файл даёт FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.is_file():
            return SeoqConfig()
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")

    return SeoqConfig(**data)


__all__ = [
    "SeoqConfig",
    "FetchMode",
    "load_config",
    "API_KEY_ENV",
    "LIMIT_MIN",
    "LIMIT_MAX",
    "MAX_ISSUES_MIN",
    "MAX_ISSUES_MAX",
]
