"""
Configuration loader for the Tapo locator.

Handles the YAML discovery configuration (with fallback to defaults) and the
credentials file used by the toggle command.
"""

import json
import yaml
from typing import Dict, Any, Optional, List
from dataclasses import asdict, dataclass, field
from pathlib import Path

from ..core.data_models import Credentials
from ..utils.error_handler import ConfigurationError
from ..utils.logger import Logger, get_logger

DISCOVERY_PORT = 20002
DISCOVERY_PAYLOAD = '{"method":"discovery","params":{}}'
PRESCAN_METHODS = ("ping", "scapy")


@dataclass
class PrescanConfig:
    """Configuration for the ICMP subnet sweep."""
    method: str = "ping"  # ping, scapy
    timeout: float = 0.15
    parallel_threads: int = 254
    process_grace: float = 1.0  # extra time for spawning the ping binary


@dataclass
class BroadcastConfig:
    """Configuration for UDP broadcast discovery."""
    port: int = DISCOVERY_PORT
    timeout: float = 1.5
    payload: str = DISCOVERY_PAYLOAD
    buffer_size: int = 4096


@dataclass
class NeighborTableConfig:
    """Configuration for the OS neighbor table lookup."""
    timeout: float = 5.0
    command: Optional[List[str]] = None  # None selects the platform default


@dataclass
class DiscoveryConfig:
    """Complete discovery configuration."""
    prescan: PrescanConfig = field(default_factory=PrescanConfig)
    broadcast: BroadcastConfig = field(default_factory=BroadcastConfig)
    neighbor_table: NeighborTableConfig = field(default_factory=NeighborTableConfig)
    deadline: Optional[float] = None  # overall budget in seconds, None disables


class ConfigLoader:
    """
    Loads and validates the YAML discovery configuration and credentials files.
    Invalid or missing discovery settings fall back to defaults with a warning.
    """

    DEFAULT_CONFIG_FILE = "locator_config.yml"
    CREDENTIALS_SECTION = "TapoConfig"

    def __init__(self, config_dir: Optional[str] = None, logger: Optional[Logger] = None):
        """
        Initialize ConfigLoader.

        Args:
            config_dir: Directory containing locator_config.yml.
                        Defaults to the current working directory.
        """
        self.config_dir = Path(config_dir) if config_dir else Path.cwd()
        self.logger = logger or get_logger(__name__)

    def load_discovery_config(self, config_file: Optional[str] = None) -> DiscoveryConfig:
        """
        Load the discovery configuration from YAML.

        Args:
            config_file: Name of the configuration file inside config_dir

        Returns:
            DiscoveryConfig with loaded or default values
        """
        config_path = self.config_dir / (config_file or self.DEFAULT_CONFIG_FILE)

        if not config_path.exists():
            self.logger.debug(f"Discovery config not found at {config_path}. Using defaults.")
            return DiscoveryConfig()

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config_data = yaml.safe_load(f)
        except (yaml.YAMLError, OSError) as e:
            self.logger.error(f"Error reading discovery config {config_path}: {e}")
            self.logger.warning("Using default discovery configuration.")
            return DiscoveryConfig()

        if not isinstance(config_data, dict):
            self.logger.warning(f"Invalid config structure in {config_path}. Using defaults.")
            return DiscoveryConfig()

        return self.parse_discovery_config(config_data)

    def parse_discovery_config(self, config_data: Dict[str, Any]) -> DiscoveryConfig:
        """Build a DiscoveryConfig from an already parsed mapping."""
        prescan_data = self._section(config_data, 'prescan')
        broadcast_data = self._section(config_data, 'broadcast')
        neighbor_data = self._section(config_data, 'neighbor_table')
        discovery_data = self._section(config_data, 'discovery')

        defaults = DiscoveryConfig()

        prescan = PrescanConfig(
            method=self._validate_choice(prescan_data.get('method', defaults.prescan.method),
                                         'prescan.method', PRESCAN_METHODS, defaults.prescan.method),
            timeout=self._validate_positive_number(prescan_data.get('timeout', defaults.prescan.timeout),
                                                   'prescan.timeout', defaults.prescan.timeout),
            parallel_threads=int(self._validate_positive_number(
                prescan_data.get('parallel_threads', defaults.prescan.parallel_threads),
                'prescan.parallel_threads', defaults.prescan.parallel_threads)),
            process_grace=self._validate_positive_number(
                prescan_data.get('process_grace', defaults.prescan.process_grace),
                'prescan.process_grace', defaults.prescan.process_grace)
        )

        port = broadcast_data.get('port', defaults.broadcast.port)
        if not isinstance(port, int) or isinstance(port, bool) or not 0 < port < 65536:
            self.logger.warning(f"Invalid broadcast.port value: {port}. Using default: {defaults.broadcast.port}")
            port = defaults.broadcast.port

        payload = broadcast_data.get('payload', defaults.broadcast.payload)
        if not isinstance(payload, str) or not payload:
            self.logger.warning("Invalid broadcast.payload value. Using default discovery query.")
            payload = defaults.broadcast.payload

        broadcast = BroadcastConfig(
            port=port,
            timeout=self._validate_positive_number(broadcast_data.get('timeout', defaults.broadcast.timeout),
                                                   'broadcast.timeout', defaults.broadcast.timeout),
            payload=payload,
            buffer_size=int(self._validate_positive_number(
                broadcast_data.get('buffer_size', defaults.broadcast.buffer_size),
                'broadcast.buffer_size', defaults.broadcast.buffer_size))
        )

        command = neighbor_data.get('command')
        if command is not None:
            if isinstance(command, str):
                command = command.split()
            if not isinstance(command, list) or not command or not all(isinstance(c, str) for c in command):
                self.logger.warning("Invalid neighbor_table.command value. Using platform default.")
                command = None

        neighbor_table = NeighborTableConfig(
            timeout=self._validate_positive_number(neighbor_data.get('timeout', defaults.neighbor_table.timeout),
                                                   'neighbor_table.timeout', defaults.neighbor_table.timeout),
            command=command
        )

        deadline = discovery_data.get('deadline')
        if deadline is not None:
            deadline = self._validate_positive_number(deadline, 'discovery.deadline', None)

        return DiscoveryConfig(
            prescan=prescan,
            broadcast=broadcast,
            neighbor_table=neighbor_table,
            deadline=deadline
        )

    def load_credentials(self, config_file: Optional[str] = None, required: bool = True) -> Credentials:
        """
        Load account credentials from a JSON or YAML file.

        A bare name gets ``.json`` appended. The file holds a ``TapoConfig``
        section with ``Email``, ``Password`` and ``DeviceLabel`` keys.

        Args:
            config_file: Path or bare name; None loads the optional config.json
            required: Raise when the file does not exist

        Returns:
            Credentials (possibly empty when the file is optional and missing)

        Raises:
            ConfigurationError: If a required file is missing or unreadable
        """
        if config_file is None:
            config_path = Path.cwd() / "config.json"
            required = False
        else:
            config_path = self.resolve_credentials_path(config_file)

        if not config_path.exists():
            if required:
                raise ConfigurationError(f"Configuration file '{config_path}' not found.")
            self.logger.debug(f"No credentials file at {config_path}")
            return Credentials()

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                if config_path.suffix.lower() in ('.yml', '.yaml'):
                    data = yaml.safe_load(f)
                else:
                    data = json.load(f)
        except (json.JSONDecodeError, yaml.YAMLError, OSError) as e:
            raise ConfigurationError(f"Cannot read configuration file '{config_path}': {e}") from e

        section = data.get(self.CREDENTIALS_SECTION) if isinstance(data, dict) else None
        if not isinstance(section, dict):
            if required:
                raise ConfigurationError(
                    f"Configuration file '{config_path}' has no '{self.CREDENTIALS_SECTION}' section."
                )
            return Credentials()

        return Credentials(
            email=str(section.get('Email') or ""),
            password=str(section.get('Password') or ""),
            device_label=str(section.get('DeviceLabel') or "")
        )

    def create_default_config(self) -> Optional[Path]:
        """
        Write locator_config.yml with default values if it doesn't exist.

        Returns:
            Path of the created file, or None when nothing was written
        """
        config_path = self.config_dir / self.DEFAULT_CONFIG_FILE
        if config_path.exists():
            self.logger.info(f"Discovery config already exists at {config_path}")
            return None

        defaults = DiscoveryConfig()
        default_config = {
            'prescan': asdict(defaults.prescan),
            'broadcast': asdict(defaults.broadcast),
            'neighbor_table': asdict(defaults.neighbor_table),
            'discovery': {'deadline': defaults.deadline}
        }

        try:
            with open(config_path, 'w', encoding='utf-8') as f:
                yaml.safe_dump(default_config, f, default_flow_style=False, indent=2, sort_keys=False)
        except OSError as e:
            raise ConfigurationError(f"Failed to create default config at {config_path}: {e}") from e

        self.logger.success(f"Created default discovery config at {config_path}")
        return config_path

    @staticmethod
    def resolve_credentials_path(config_file: str) -> Path:
        path = Path(config_file)
        if path.suffix.lower() not in ('.json', '.yml', '.yaml'):
            path = path.with_name(path.name + ".json")
        return path

    def _section(self, config_data: Dict[str, Any], name: str) -> Dict[str, Any]:
        section = config_data.get(name) or {}
        if not isinstance(section, dict):
            self.logger.warning(f"Config section '{name}' is not a mapping. Using defaults.")
            return {}
        return section

    def _validate_positive_number(self, value: Any, field_name: str, default):
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            self.logger.warning(f"Invalid {field_name} value: {value}. Using default: {default}")
            return default
        return value

    def _validate_choice(self, value: Any, field_name: str, choices, default: str) -> str:
        if value not in choices:
            self.logger.warning(f"Invalid {field_name} '{value}'. Valid options: {list(choices)}. Using default: {default}")
            return default
        return value
