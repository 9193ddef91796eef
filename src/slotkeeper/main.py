# File: src/slotkeeper/main.py
"""
SlotKeeper - Main Application Entry Point

Wires the layers together:
1. Settings (YAML file or defaults)
2. Logging (log file plus warnings on the console)
3. Domain objects and file repositories
4. Parking service, restored from the previous run
5. Console menu, which saves everything on exit
"""

from typing import List, Optional
import argparse
import logging
import sys

from . import __version__
from .application.parking_service import ParkingService
from .domain.registry import SlotRegistry
from .domain.tariffs import TariffTable
from .exceptions import ConfigurationError
from .infrastructure.config import AppSettings, CONFIG_ENV_VAR, load_settings
from .infrastructure.repositories import FileStateRepository, TextFileTariffRepository
from .presentation.console import ConsoleMenu


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(settings: AppSettings) -> logging.Logger:
    """Setup application logging configuration"""
    handlers: List[logging.Handler] = []
    log_file_error: Optional[OSError] = None

    if settings.log_file is not None:
        try:
            settings.log_file.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(settings.log_file, encoding="utf-8"))
        except OSError as e:
            log_file_error = e

    # The menu shares stdout, so only problems are echoed there
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.WARNING)
    handlers.append(console_handler)

    logging.basicConfig(
        level=settings.log_level,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True
    )
    logger = logging.getLogger(__name__)
    if log_file_error is not None:
        logger.warning(f"Cannot open log file {settings.log_file}, logging to console only: {log_file_error}")
    return logger


class ParkingApplication:
    """Main application controller that sets up all components"""

    def __init__(self, settings: AppSettings):
        self.settings = settings
        self.logger = setup_logging(settings)
        self.logger.info(f"Starting SlotKeeper {__version__}...")

        self.setup_components()

    def setup_components(self):
        """Initialize all application components with dependency injection"""
        # 1. Domain
        self.registry = SlotRegistry(self.settings.capacity)
        self.tariffs = TariffTable()

        # 2. Repositories (Data Access Layer)
        self.state_repository = FileStateRepository(self.settings.state_file)
        self.tariff_repository = TextFileTariffRepository(self.settings.tariff_file)
        self.logger.info(
            f"State file: {self.settings.state_file}, tariff file: {self.settings.tariff_file}"
        )

        # 3. Parking Service (Application Layer)
        self.parking_service = ParkingService(
            registry=self.registry,
            tariffs=self.tariffs,
            state_repository=self.state_repository,
            tariff_repository=self.tariff_repository
        )

    def run(self, input_stream=None, output_stream=None):
        """Restore the previous run and hand control to the menu"""
        self.parking_service.startup()
        menu = ConsoleMenu(
            self.parking_service,
            input_stream=input_stream,
            output_stream=output_stream,
            currency_symbol=self.settings.currency_symbol
        )
        try:
            menu.run()
        except KeyboardInterrupt:
            self.logger.warning("Interrupted, saving state")
            menu.save_and_exit()
        self.logger.info("SlotKeeper stopped")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="slotkeeper",
        description="Parking lot occupancy and billing tracker"
    )
    parser.add_argument(
        "--config",
        help=f"YAML settings file (default: ${CONFIG_ENV_VAR} or ./slotkeeper.yaml)"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application"""
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args.config)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    app = ParkingApplication(settings)
    app.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
