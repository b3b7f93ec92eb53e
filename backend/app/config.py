from dataclasses import dataclass
from typing import Any, Dict, Mapping

from dynaconf import Dynaconf
from backend.app.constants import DEFAULTS

from mindgraph.config.settings import (
    RateLimitPolicy,
    RateLimitConfig,
    MindGraphConfig,
)

settings = Dynaconf(
    envvar_prefix="MINDGRAPH",
    load_dotenv=True,
    settings_files=[],
)
settings.update(DEFAULTS)


def _parse_policies(value: Any) -> Dict[str, RateLimitPolicy]:
    if not value:
        return {}
    policies = {}
    for action, raw in dict(value).items():
        policies[str(action)] = RateLimitPolicy(
            max_requests=int(raw["max_requests"]),
            window_ms=int(raw["window_ms"]),
        )
    return policies


def build_mindgraph_config(source: Mapping[str, Any]) -> MindGraphConfig:
    return MindGraphConfig(
        rate_limit=RateLimitConfig(
            enabled=bool(source.get("RATE_LIMIT_ENABLED", True)),
            policies=_parse_policies(source.get("RATE_LIMITS")),
        ),
    )


@dataclass(frozen=True)
class AppConfig:
    # ---------------- App ----------------
    app_name: str = settings.get("APP_NAME", "mindgraph-backend")
    api_prefix: str = settings.get("API_PREFIX", "")
    user_id_header: str = settings.get("USER_ID_HEADER", "X-User-Id")
    log_level: str = settings.get("LOG_LEVEL", "INFO")

    # ---------------- Mindgraph Policy ----------------
    mindgraph: MindGraphConfig = build_mindgraph_config(settings)
