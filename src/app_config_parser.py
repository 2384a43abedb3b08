"""Typed parser for config.toml sections into immutable app settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from app_config_schema import (
    AppConfig,
    AppConfigurationError,
    FeedbackSettings,
    SessionSettings,
    UIServerSettings,
)
from workout_timer.constants import DEFAULT_HAPTIC_PATTERN_MS, DEFAULT_TICK_INTERVAL_MS


def parse_app_config(
    raw: Mapping[str, Any],
    *,
    base_dir: Path,
    source_file: str,
) -> AppConfig:
    """Parse raw TOML mappings into strongly typed application settings."""
    session = _parse_session_settings(_section(raw, "session"))
    feedback = _parse_feedback_settings(_section(raw, "feedback"))
    ui_server = _parse_ui_server_settings(_section(raw, "ui_server"), base_dir=base_dir)

    return AppConfig(
        session=session,
        feedback=feedback,
        ui_server=ui_server,
        source_file=source_file,
    )


def _parse_session_settings(section: Mapping[str, Any]) -> SessionSettings:
    tick_interval_ms = _as_int(
        section.get("tick_interval_ms", DEFAULT_TICK_INTERVAL_MS),
        "session.tick_interval_ms",
    )
    if tick_interval_ms <= 0:
        raise AppConfigurationError("session.tick_interval_ms must be positive.")

    poll_interval_seconds = _as_float(
        section.get("poll_interval_seconds", 0.05),
        "session.poll_interval_seconds",
    )
    if poll_interval_seconds <= 0:
        raise AppConfigurationError("session.poll_interval_seconds must be positive.")

    return SessionSettings(
        tick_interval_ms=tick_interval_ms,
        poll_interval_seconds=poll_interval_seconds,
        strict_scheduling=_as_bool(
            section.get("strict_scheduling", False),
            "session.strict_scheduling",
        ),
    )


def _parse_feedback_settings(section: Mapping[str, Any]) -> FeedbackSettings:
    return FeedbackSettings(
        enabled=_as_bool(section.get("enabled", True), "feedback.enabled"),
        output_device=(
            _as_int(section.get("output_device"), "feedback.output_device")
            if "output_device" in section
            else None
        ),
        sample_rate_hz=_as_int(
            section.get("sample_rate_hz", 44100),
            "feedback.sample_rate_hz",
        ),
        cue_volume=_as_volume(section.get("cue_volume", 1.0), "feedback.cue_volume"),
        ambient_volume=_as_volume(
            section.get("ambient_volume", 0.5),
            "feedback.ambient_volume",
        ),
        completion_volume=_as_volume(
            section.get("completion_volume", 1.0),
            "feedback.completion_volume",
        ),
        haptic_pattern_ms=_as_pattern(
            section.get("haptic_pattern_ms", list(DEFAULT_HAPTIC_PATTERN_MS)),
            "feedback.haptic_pattern_ms",
        ),
    )


def _parse_ui_server_settings(
    section: Mapping[str, Any],
    *,
    base_dir: Path,
) -> UIServerSettings:
    index_file = _as_str(section.get("index_file", ""), "ui_server.index_file")
    return UIServerSettings(
        enabled=_as_bool(section.get("enabled", True), "ui_server.enabled"),
        host=_as_str(section.get("host", "127.0.0.1"), "ui_server.host"),
        port=_as_int(section.get("port", 8765), "ui_server.port"),
        index_file=_resolve_path(base_dir, index_file) if index_file else "",
    )


def _section(root: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    raw = root.get(name, {})
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise AppConfigurationError(f"[{name}] must be a table.")
    return raw


def _as_str(value: Any, field: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    raise AppConfigurationError(f"{field} must be a string.")


def _as_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off"):
            return False
    raise AppConfigurationError(f"{field} must be a boolean.")


def _as_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be an integer.")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        base = 16 if text.startswith("0x") else 10
        try:
            return int(text, base)
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be an integer.") from error
    raise AppConfigurationError(f"{field} must be an integer.")


def _as_float(value: Any, field: str) -> float:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be a float.")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be a float.") from error
    raise AppConfigurationError(f"{field} must be a float.")


def _as_volume(value: Any, field: str) -> float:
    volume = _as_float(value, field)
    if not 0.0 <= volume <= 1.0:
        raise AppConfigurationError(f"{field} must be in [0.0, 1.0].")
    return volume


def _as_pattern(value: Any, field: str) -> tuple[int, ...]:
    if not isinstance(value, (list, tuple)) or not value:
        raise AppConfigurationError(f"{field} must be a non-empty array of integers.")
    pattern = tuple(_as_int(step, field) for step in value)
    if any(step < 0 for step in pattern):
        raise AppConfigurationError(f"{field} values must be non-negative.")
    return pattern


def _resolve_path(base_dir: Path, raw: str) -> str:
    if not raw:
        return ""
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (base_dir / path).resolve()
    return str(path)
