"""Main entry point for the Relay Control service."""

import argparse
import logging
import sys
from typing import NoReturn, Tuple

from relay_control import __version__
from relay_control.access import AccessResolver, build_credential_map
from relay_control.config import ConfigManager, ConfigurationError
from relay_control.hardware import get_gpio
from relay_control.hardware.gpio_abstraction import GPIO
from relay_control.hardware.pins import PinRegistry, build_registry
from relay_control.pin_controller import DEFAULT_BLINK_HOLD, DEFAULT_BLINK_LEAD, PinController

logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False, level: str = "INFO") -> None:
    """Configure logging for the application.

    Args:
        debug: If True, force DEBUG regardless of ``level``
        level: Level name from configuration
    """
    log_level = logging.DEBUG if debug else getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed command-line arguments
    """
    parser = argparse.ArgumentParser(
        description="Relay Control - Key-scoped remote control of relay pins"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--mock-gpio",
        action="store_true",
        help="Use mock GPIO instead of real hardware (for testing)",
    )
    parser.add_argument(
        "--config",
        type=str,
        default="config.yml",
        help="Path to configuration file (default: config.yml)",
    )
    return parser.parse_args()


def _load_config(config_path: str) -> ConfigManager:
    """Load and validate configuration.

    Args:
        config_path: Path to configuration file

    Returns:
        Initialized ConfigManager

    Raises:
        SystemExit: If configuration is invalid
    """
    try:
        config = ConfigManager(user_config_path=config_path)
        logger.info("Credential groups: %d", len(config.get_key_pin_control()))
        return config
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        sys.exit(1)


def _init_gpio(mock: bool) -> GPIO:
    """Initialize the GPIO driver in BCM numbering.

    Raises:
        SystemExit: If the driver is not available
    """
    try:
        gpio = get_gpio(mock=mock)
        gpio.setwarnings(False)
        gpio.setmode(GPIO.BCM)
        logger.info("Hardware interface initialized successfully")
        return gpio
    except RuntimeError as e:
        logger.error("Failed to initialize hardware interface: %s", e)
        sys.exit(1)


def build_controller(config: ConfigManager, gpio: GPIO) -> Tuple[PinRegistry, PinController]:
    """Build the registry, resolver and controller from configuration.

    Args:
        config: Configuration manager
        gpio: GPIO driver the pin lines are opened on

    Returns:
        Pin registry and the controller driving its lines

    Raises:
        ConfigurationError: If pin configuration is invalid
    """
    registry = build_registry(config.get_key_pin_control(), gpio)
    resolver = AccessResolver(build_credential_map(registry.entries))

    timing = config.get_timing_config()
    controller = PinController(
        resolver=resolver,
        gpio=gpio,
        blink_lead=timing.get("blink_lead", DEFAULT_BLINK_LEAD),
        blink_hold=timing.get("blink_hold", DEFAULT_BLINK_HOLD),
    )
    logger.info("  - PinController initialized")
    return registry, controller


def _run_web_server(
    controller: PinController, config: ConfigManager, registry: PinRegistry
) -> None:
    """Serve the HTTP interface until interrupted."""
    # pylint: disable=import-outside-toplevel
    import uvicorn

    from relay_control.web.app import create_app

    web_app = create_app(pin_controller=controller, config_manager=config, registry=registry)
    host = config.get("web.host", "0.0.0.0")
    port = config.get("web.port", 7474)
    logger.info("Web interface listening on http://%s:%d", host, port)
    uvicorn.run(web_app, host=host, port=port, log_level="warning")


def main() -> NoReturn:
    """Main application entry point."""
    args = parse_args()
    setup_logging(args.debug)

    logger.info("=" * 60)
    logger.info("Relay Control v%s", __version__)
    logger.info("=" * 60)

    config = _load_config(args.config)
    setup_logging(args.debug, config.get("logging.level", "INFO"))

    mock = args.mock_gpio or bool(config.get("hardware.mock_gpio", False))
    if mock:
        logger.info("Running in MOCK mode (no hardware required)")
    else:
        logger.info("Running with REAL hardware")
    gpio = _init_gpio(mock)

    logger.info("Initializing pin registry...")
    try:
        registry, controller = build_controller(config, gpio)
    except ConfigurationError as e:
        logger.error("Invalid pin configuration: %s", e)
        gpio.cleanup()
        sys.exit(1)

    try:
        _run_web_server(controller, config, registry)
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    finally:
        logger.info("Cleaning up hardware...")
        try:
            registry.release()
        except RuntimeError as e:
            logger.warning("Error cleaning up hardware: %s", e)

    logger.info("Goodbye!")
    sys.exit(0)


if __name__ == "__main__":
    main()
