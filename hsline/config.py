"""
Загрузчик настроек конвертации.

Настройки хранятся в YAML-файле hsline.yaml (отображение ключ -> значение)
и превращаются в ConvertOptions. Отсутствие файла означает значения по умолчанию.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .errors import ConfigError
from .types import ConvertOptions

_LOG = logging.getLogger("hsline.config")

CONFIG_FILE = "hsline.yaml"

_yaml = YAML(typ="safe")


def _read_yaml_map(path: Path) -> dict:
    """Читает YAML файл и возвращает словарь."""
    if not path.is_file():
        return {}
    try:
        raw = _yaml.load(path.read_text(encoding="utf-8")) or {}
    except YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"YAML must be a mapping: {path}")
    return raw


def find_config(start: Path) -> Optional[Path]:
    """
    Ищет hsline.yaml в каталоге start и выше по дереву.

    Returns:
        Путь к найденному файлу или None
    """
    current = start.resolve()
    if current.is_file():
        current = current.parent
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILE
        if candidate.is_file():
            return candidate
    return None


def load_options(path: Optional[Path]) -> ConvertOptions:
    """
    Загружает настройки конвертации из YAML-файла.

    Args:
        path: Путь к файлу настроек; None или отсутствующий файл дают значения по умолчанию

    Returns:
        Провалидированные настройки

    Raises:
        ConfigError: При некорректном YAML или недопустимых значениях
    """
    if path is None:
        return ConvertOptions()
    raw = _read_yaml_map(path)
    options = ConvertOptions.from_dict(raw)
    _LOG.debug("Loaded options from %s: %s", path, options.to_dict())
    return options


__all__ = ["CONFIG_FILE", "find_config", "load_options"]
