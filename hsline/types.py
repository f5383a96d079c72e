from __future__ import annotations

import re
from dataclasses import dataclass, fields
from typing import Any, Dict, NewType

from .errors import ConfigError

# ---- Aliases for clarity ----
AliasName = NewType("AliasName", str)  # "item", "product", ...
DEFAULT_ALIAS: AliasName = AliasName("item")

_IDENT_RE = re.compile(r"^[A-Za-z_$][\w$]*$")


# -----------------------------
@dataclass(frozen=True)
class ConvertOptions:
    # Разрешить ../: квалификаторы снимаются с предупреждением
    allow_parent_scope: bool = False
    # Любая диагностика делает итоговый статус blocked
    strict: bool = False
    # Имя переменной цикла для {{#each}} без block params
    default_alias: AliasName = DEFAULT_ALIAS

    def __post_init__(self):
        if not _IDENT_RE.match(self.default_alias or ""):
            raise ConfigError(f"default_alias: invalid identifier {self.default_alias!r}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConvertOptions":
        """Создание экземпляра из словаря (из YAML)."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown option(s): {', '.join(map(str, unknown))}")

        for key in ("allow_parent_scope", "strict"):
            if key in data and not isinstance(data[key], bool):
                raise ConfigError(f"{key}: expected bool, got {type(data[key]).__name__}")
        if "default_alias" in data and not isinstance(data["default_alias"], str):
            raise ConfigError(
                f"default_alias: expected str, got {type(data['default_alias']).__name__}"
            )

        return cls(
            allow_parent_scope=bool(data.get("allow_parent_scope", False)),
            strict=bool(data.get("strict", False)),
            default_alias=AliasName(data.get("default_alias", DEFAULT_ALIAS)),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Сериализация в словарь для YAML."""
        return {
            "allow_parent_scope": self.allow_parent_scope,
            "strict": self.strict,
            "default_alias": str(self.default_alias),
        }


__all__ = ["AliasName", "DEFAULT_ALIAS", "ConvertOptions"]
