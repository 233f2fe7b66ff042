"""
Main entry point for the Tapo locator.

This module provides the command-line interface: argument parsing, credential
prompting, the interactive device menu, and graceful shutdown handling.
"""

import argparse
import getpass
import signal
import sys
from typing import Callable, List, Optional

from . import __version__
from .config.config_loader import ConfigLoader
from .core.data_models import CloudDevice, Credentials, DiscoveryRequest
from .core.discovery_orchestrator import DiscoveryOrchestrator
from .utils.error_handler import TapoLocatorError
from .utils.logger import LogLevel, get_logger, set_log_level


class TapoLocatorApp:
    """
    Command line application.

    Handles the ``locate``, ``devices`` and ``toggle`` commands.
    """

    def __init__(self, input_func: Callable[[str], str] = input,
                 password_func: Callable[[str], str] = getpass.getpass):
        """
        Initialize the application.

        Args:
            input_func: Prompt function for interactive input
            password_func: Prompt function for the password (no echo)
        """
        self.logger = get_logger("tapo_locator")
        self.input_func = input_func
        self.password_func = password_func

    def install_signal_handlers(self) -> None:
        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

    def _signal_handler(self, signum: int, frame) -> None:
        raise KeyboardInterrupt()

    def run(self, args: argparse.Namespace) -> int:
        """
        Run the selected command.

        Returns:
            int: Exit code (0 for success, non-zero for failure)
        """
        config_loader = ConfigLoader(args.config_dir, logger=self.logger)
        try:
            if args.command == "locate":
                return self._run_locate(args, config_loader)
            if args.command == "devices":
                return self._run_devices(args, config_loader)
            return self._run_toggle(args, config_loader)
        except KeyboardInterrupt:
            self.logger.warning("Interrupted by user")
            return 130
        except TapoLocatorError as e:
            self.logger.error(str(e))
            if e.__cause__ is not None:
                self.logger.error(f"Inner error: {e.__cause__}")
            return 1
        except Exception as e:
            self.logger.error(f"{args.command} failed: {e}", exception=e)
            return 1

    def _run_locate(self, args: argparse.Namespace, config_loader: ConfigLoader) -> int:
        config = config_loader.load_discovery_config()
        orchestrator = DiscoveryOrchestrator(config=config, logger=self.logger)

        self.logger.progress_start(f"Resolving local IP for {args.mac}")
        result = orchestrator.discover(DiscoveryRequest(args.mac))

        if not result.resolved:
            self.logger.progress_end()
            self.logger.warning("Could not find the device on the local network")
            return 1

        self.logger.progress_end(f"Resolved local IP: {result.ip_address} (via {result.resolved_by})")
        print(result.ip_address)
        return 0

    def _run_devices(self, args: argparse.Namespace, config_loader: ConfigLoader) -> int:
        from .clients.cloud_client import TapoCloudClient

        credentials = self._load_credentials(args.config, config_loader)
        cloud_client = TapoCloudClient(logger=self.logger)
        token = cloud_client.login(credentials.email, credentials.password)

        devices = cloud_client.list_devices(token)
        if not devices:
            self.logger.warning("No devices registered to this account")
            return 0

        for device in devices:
            print(f"{device.alias}\t{device.device_model}\t{device.device_mac}")
        return 0

    def _run_toggle(self, args: argparse.Namespace, config_loader: ConfigLoader) -> int:
        from .clients.cloud_client import TapoCloudClient
        from .clients.kasa_client import KasaDeviceClient
        from .core.toggle_workflow import ToggleWorkflow

        self.logger.section("Tapo Toggle")
        credentials = self._load_credentials(args.config, config_loader)
        interactive = args.config is None
        if args.label:
            credentials.device_label = args.label

        config = config_loader.load_discovery_config()
        workflow = ToggleWorkflow(
            cloud_client=TapoCloudClient(logger=self.logger),
            device_client=KasaDeviceClient(logger=self.logger),
            orchestrator=DiscoveryOrchestrator(config=config, logger=self.logger),
            logger=self.logger
        )

        outcome = workflow.run(credentials, chooser=self.choose_device if interactive else None)
        self.logger.success(f"{outcome.nickname} is now {'ON' if outcome.new_state else 'OFF'}")
        return 0

    def _load_credentials(self, config_file: Optional[str], config_loader: ConfigLoader) -> Credentials:
        """
        Load credentials from the named file, or prompt for missing ones.
        """
        if config_file is not None:
            credentials = config_loader.load_credentials(config_file)
            self.logger.info(f"Using configuration: {config_loader.resolve_credentials_path(config_file)}")
            return credentials

        credentials = config_loader.load_credentials(None)
        credentials.device_label = ""
        if not credentials.complete:
            self.logger.warning("No configuration file provided and default credentials missing.")
            credentials.email = self.input_func("Enter Tapo Email: ").strip()
            credentials.password = self.password_func("Enter Tapo Password: ")
        return credentials

    def choose_device(self, devices: List[CloudDevice]) -> Optional[CloudDevice]:
        """
        Numbered device menu; re-prompts until a valid number is entered.
        """
        if not devices:
            return None

        print("\n--- Available Devices ---")
        for index, device in enumerate(devices, start=1):
            print(f" {index}. {device.alias} ({device.device_model})")

        while True:
            answer = self.input_func(f"\nSelect a device (1-{len(devices)}): ").strip()
            if answer.isdigit() and 1 <= int(answer) <= len(devices):
                return devices[int(answer) - 1]
            self.logger.warning("Invalid selection.")


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the command line argument parser.

    Returns:
        argparse.ArgumentParser: Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="tapo_locator",
        description="Locate a Tapo device on the local network by MAC address and toggle it",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m tapo_locator locate AA:BB:CC:DD:EE:FF    # Print the device IP
  python -m tapo_locator toggle                       # Prompt for credentials, pick from a menu
  python -m tapo_locator toggle lamp                  # Use lamp.json (TapoConfig section)
  python -m tapo_locator devices lamp.yml             # List devices on the account
        """
    )

    parser.add_argument(
        "--config-dir",
        type=str,
        help="Directory containing locator_config.yml. Defaults to the current directory"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging output"
    )
    parser.add_argument(
        "--create-config",
        action="store_true",
        help="Write a default locator_config.yml into the config directory and exit"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"Tapo Locator {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command")

    locate = subparsers.add_parser("locate", help="Resolve the IP address of a MAC address")
    locate.add_argument("mac", help="MAC address, any separator style")

    devices = subparsers.add_parser("devices", help="List devices registered to the cloud account")
    devices.add_argument("config", nargs="?", help="Credentials file (name, .json, .yml)")

    toggle = subparsers.add_parser("toggle", help="Toggle the power state of a device")
    toggle.add_argument("config", nargs="?", help="Credentials file (name, .json, .yml)")
    toggle.add_argument("--label", help="Device alias, overrides DeviceLabel from the file")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the Tapo locator.

    Returns:
        int: Exit code (0 for success, non-zero for failure)
    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        args.command = "toggle"
        args.config = None
        args.label = None

    if args.verbose:
        set_log_level(LogLevel.DEBUG)

    if args.create_config:
        try:
            ConfigLoader(args.config_dir).create_default_config()
        except TapoLocatorError as e:
            get_logger("tapo_locator").error(str(e))
            return 1
        return 0

    app = TapoLocatorApp()
    app.install_signal_handlers()
    return app.run(args)


if __name__ == "__main__":
    sys.exit(main())
