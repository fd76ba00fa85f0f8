from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from ..utils.logging import debug_forced_by_env

DEFAULT_API_BASE_URL = "http://127.0.0.1:8000"
DEFAULT_CONTACT_URL_TEMPLATE = "https://app.hubspot.com/contacts/{hub_id}/contact/{contact_id}"
LIST_PROCESSING_TYPES: Tuple[str, ...] = ("MANUAL", "DYNAMIC", "SNAPSHOT")


@dataclass
class SettingsConfig:
    """Typed runtime settings that persist via StorageLocal."""

    api_base_url: str = DEFAULT_API_BASE_URL
    parser_base_url: str = ""
    request_timeout_s: int = 10
    search_timeout_s: int = 15
    upload_timeout_s: int = 15
    list_processing_types: Tuple[str, ...] = field(default_factory=lambda: ("MANUAL", "DYNAMIC"))
    list_limit: int = 100
    crm_hub_id: str = ""
    crm_contact_url_template: str = DEFAULT_CONTACT_URL_TEMPLATE
    api_key: str = ""


class SettingsVM:
    """Keeps app settings state and validation, no I/O here."""

    def __init__(
        self,
        *,
        config: Optional[SettingsConfig] = None,
        on_save: Optional[Callable[[dict], None]] = None,
    ) -> None:
        self.config = config or SettingsConfig()
        self.on_save = on_save
        self.debug_logging: bool = debug_forced_by_env()

    # ------------------------------------------------------------------
    # Properties bridging to the typed config
    # ------------------------------------------------------------------
    @property
    def api_base_url(self) -> str:
        return self.config.api_base_url

    @api_base_url.setter
    def api_base_url(self, value: str) -> None:
        self.config = replace(self.config, api_base_url=self._coerce_url("api_base_url", value))

    @property
    def parser_base_url(self) -> str:
        """Parser endpoint base; falls back to ``api_base_url`` when unset."""
        return self.config.parser_base_url or self.config.api_base_url

    @parser_base_url.setter
    def parser_base_url(self, value: str) -> None:
        self.config = replace(self.config, parser_base_url=self._coerce_url("parser_base_url", value))

    @property
    def request_timeout_s(self) -> int:
        return self.config.request_timeout_s

    @request_timeout_s.setter
    def request_timeout_s(self, value: int) -> None:
        self.config = replace(self.config, request_timeout_s=self._coerce_timeout("request_timeout_s", value))

    @property
    def search_timeout_s(self) -> int:
        return self.config.search_timeout_s

    @search_timeout_s.setter
    def search_timeout_s(self, value: int) -> None:
        self.config = replace(self.config, search_timeout_s=self._coerce_timeout("search_timeout_s", value))

    @property
    def upload_timeout_s(self) -> int:
        return self.config.upload_timeout_s

    @upload_timeout_s.setter
    def upload_timeout_s(self, value: int) -> None:
        self.config = replace(self.config, upload_timeout_s=self._coerce_timeout("upload_timeout_s", value))

    @property
    def list_processing_types(self) -> Tuple[str, ...]:
        return self.config.list_processing_types

    @property
    def list_limit(self) -> int:
        return self.config.list_limit

    @property
    def api_key(self) -> str:
        return self.config.api_key

    # ------------------------------------------------------------------
    def is_valid(self) -> bool:
        if not self.config.api_base_url:
            return False
        if self.config.list_limit <= 0:
            return False
        return all(
            value > 0
            for value in (
                self.config.request_timeout_s,
                self.config.search_timeout_s,
                self.config.upload_timeout_s,
            )
        )

    def contact_url(self, contact_id: str) -> Optional[str]:
        """CRM link for a contact, or ``None`` when no hub id is configured."""
        if not self.config.crm_hub_id or not contact_id:
            return None
        return self.config.crm_contact_url_template.format(
            hub_id=self.config.crm_hub_id, contact_id=contact_id
        )

    def apply_dict(self, payload: Mapping[str, Any]) -> None:
        """Apply persisted settings to the view-model."""

        if not isinstance(payload, Mapping):
            raise ValueError("Settings payload must be a mapping of flat keys.")

        allowed_flat_keys = {*SettingsConfig.__annotations__.keys(), "debug_logging"}
        unknown = set(payload.keys()) - allowed_flat_keys
        if unknown:
            raise ValueError(f"Unsupported settings keys: {', '.join(sorted(str(key) for key in unknown))}")

        updates: Dict[str, Any] = {}
        for cfg_key in SettingsConfig.__annotations__.keys():
            if cfg_key in payload:
                updates[cfg_key] = self._coerce_config_value(cfg_key, payload[cfg_key])

        if updates:
            self.config = replace(self.config, **updates)

        if "debug_logging" in payload:
            self.debug_logging = self._coerce_bool(payload["debug_logging"])

    def to_dict(self) -> dict:
        snapshot = asdict(self.config)
        snapshot["list_processing_types"] = list(self.config.list_processing_types)
        snapshot["debug_logging"] = bool(self.debug_logging)
        return snapshot

    def set_debug_logging(self, enabled: bool) -> None:
        self.debug_logging = self._coerce_bool(enabled)

    def cmd_save(self) -> None:
        if not self.is_valid():
            raise ValueError("Settings invalid")
        if self.on_save:
            self.on_save(self.to_dict())

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _coerce_config_value(self, key: str, raw: Any) -> Any:
        if key in {"api_base_url", "parser_base_url"}:
            return self._coerce_url(key, raw)
        if key in {"request_timeout_s", "search_timeout_s", "upload_timeout_s"}:
            return self._coerce_timeout(key, raw)
        if key == "list_limit":
            return self._coerce_int(key, raw, allow_negative=False)
        if key == "list_processing_types":
            return self._coerce_processing_types(raw)
        if key in {"crm_hub_id", "crm_contact_url_template", "api_key"}:
            return self._coerce_optional_str(raw)
        raise ValueError(f"Unhandled config field: {key}")

    @staticmethod
    def _coerce_url(name: str, value: Any) -> str:
        if value is None:
            return ""
        if not isinstance(value, str):
            raise ValueError(f"{name} must be a string URL.")
        text = value.strip().rstrip("/")
        if text and not text.startswith(("http://", "https://")):
            raise ValueError(f"{name} must start with http:// or https://.")
        return text

    @staticmethod
    def _coerce_optional_str(value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip()

    @staticmethod
    def _coerce_bool(value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return bool(value)
        if isinstance(value, str):
            return value.strip().lower() in {"1", "true", "yes", "on"}
        return bool(value)

    @staticmethod
    def _coerce_int(name: str, value: Any, *, allow_negative: bool = True) -> int:
        if isinstance(value, bool):
            raise ValueError(f"{name} must be an integer.")
        if isinstance(value, (int, float)):
            coerced = int(value)
        elif isinstance(value, str):
            try:
                coerced = int(value.strip())
            except (TypeError, ValueError) as exc:
                raise ValueError(f"{name} must be an integer.") from exc
        else:
            raise ValueError(f"{name} must be an integer.")
        if not allow_negative and coerced < 0:
            raise ValueError(f"{name} must be non-negative.")
        return coerced

    def _coerce_timeout(self, name: str, value: Any) -> int:
        coerced = self._coerce_int(name, value)
        if coerced <= 0:
            raise ValueError(f"{name} must be positive.")
        return coerced

    @staticmethod
    def _coerce_processing_types(value: Any) -> Tuple[str, ...]:
        if isinstance(value, str):
            value = [part for part in value.split(",")]
        if not isinstance(value, (list, tuple)):
            raise ValueError("list_processing_types must be a list.")
        normalized = []
        for raw in value:
            token = str(raw).strip().upper()
            if not token:
                continue
            if token not in LIST_PROCESSING_TYPES:
                raise ValueError(f"list_processing_types contains unsupported type '{token}'.")
            if token not in normalized:
                normalized.append(token)
        return tuple(normalized)

