import argparse
import logging
import signal
import sys
from typing import Optional

from app_config import (
    AppConfig,
    AppConfigurationError,
    default_app_config,
    load_app_config,
    resolve_config_path,
)
from feedback import (
    FeedbackConfig,
    FeedbackConfigurationError,
    FeedbackCoordinator,
    FeedbackError,
    LoggingHapticDriver,
    SilentFeedbackBackend,
    SoundDeviceFeedbackBackend,
)
from runtime import RuntimeBootstrap, RuntimeEngine, RuntimeHooks
from server import ServerConfigurationError, UIServer, UIServerConfig
from workout_timer import SessionController, TickScheduler


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure logging for the application."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("workout_timer_app")


def setup_signal_handlers(engine: RuntimeEngine) -> None:
    """Set up graceful shutdown on SIGTERM and SIGINT."""

    def signal_handler(signum: int, frame) -> None:
        signal_name = signal.Signals(signum).name
        logging.getLogger("workout_timer_app").info("%s received, stopping...", signal_name)
        engine.request_stop()

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Workout session timer service")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.toml (defaults to $APP_CONFIG_FILE or ./config.toml)",
    )
    parser.add_argument(
        "--start-minutes",
        type=int,
        default=None,
        help="Start a workout of this many minutes immediately",
    )
    parser.add_argument("--title", default=None, help="Workout title for --start-minutes")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def build_feedback(app_config: AppConfig, logger: logging.Logger) -> FeedbackCoordinator:
    """Create the feedback coordinator, falling back to silence if audio is unavailable."""
    settings = app_config.feedback
    backend = SilentFeedbackBackend()
    if settings.enabled:
        try:
            # Imported lazily: sounddevice needs the PortAudio library.
            from feedback.output import SoundDeviceAudioOutput

            feedback_config = FeedbackConfig.from_settings(settings)
            backend = SoundDeviceFeedbackBackend(
                config=feedback_config,
                output=SoundDeviceAudioOutput(
                    output_device_index=feedback_config.output_device_index,
                    logger=logging.getLogger("feedback.output"),
                ),
                haptics=LoggingHapticDriver(logger=logging.getLogger("feedback.haptics")),
                logger=logging.getLogger("feedback.backend"),
            )
            logger.info("Audio feedback enabled")
        except (OSError, FeedbackConfigurationError, FeedbackError) as error:
            logger.error("Audio feedback initialization error: %s", error)
            logger.warning("Continuing without audio feedback.")
    else:
        logger.info("Audio feedback disabled by configuration")

    return FeedbackCoordinator(backend, logger=logging.getLogger("feedback"))


def build_ui_server(app_config: AppConfig, logger: logging.Logger) -> Optional[UIServer]:
    try:
        ui_server_config = UIServerConfig.from_settings(app_config.ui_server)
    except ServerConfigurationError as error:
        logger.error("UI server configuration error: %s", error)
        logger.warning("Continuing without UI server.")
        return None

    if not ui_server_config.enabled:
        return None

    try:
        ui_server = UIServer(
            config=ui_server_config,
            logger=logging.getLogger("ui_server"),
        )
        logger.info("Starting UI server...")
        ui_server.start(timeout_seconds=5.0)
        logger.info(
            "UI server ready at ws://%s:%d%s",
            ui_server.host,
            ui_server.port,
            ui_server.websocket_path,
        )
        return ui_server
    except Exception as error:
        logger.error("UI server startup failed: %s", error)
        logger.warning("Continuing without UI server.")
        return None


def main(argv: Optional[list[str]] = None) -> int:
    """Run the workout session timer service."""
    args = parse_args(argv)
    logger = setup_logging(level=logging.DEBUG if args.debug else logging.INFO)

    try:
        config_path = resolve_config_path(args.config)
        if config_path.exists() or args.config:
            app_config = load_app_config(str(config_path))
            logger.info("Loaded runtime config: %s", config_path)
        else:
            app_config = default_app_config()
            logger.info("No config file at %s; using defaults", config_path)
    except AppConfigurationError as error:
        logger.error("App configuration error: %s", error)
        return 1

    if args.start_minutes is not None and args.start_minutes <= 0:
        logger.error("--start-minutes must be greater than zero")
        return 1

    scheduler = TickScheduler(logger=logging.getLogger("scheduler"))
    controller = SessionController(
        scheduler=scheduler,
        feedback=build_feedback(app_config, logger),
        tick_interval_ms=app_config.session.tick_interval_ms,
        strict_scheduling=app_config.session.strict_scheduling,
        logger=logging.getLogger("session"),
    )
    ui_server = build_ui_server(app_config, logger)

    engine = RuntimeEngine(
        RuntimeBootstrap(
            logger=logger,
            app_config=app_config,
            scheduler=scheduler,
            controller=controller,
            ui_server=ui_server,
            hooks=RuntimeHooks(setup_signal_handlers=setup_signal_handlers),
        )
    )
    if args.start_minutes is not None:
        engine.start_workout(args.start_minutes, title=args.title)
    return engine.run()


if __name__ == "__main__":
    sys.exit(main())
