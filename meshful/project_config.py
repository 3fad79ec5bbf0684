"""
JSON-based project configuration for meshful.

Configuration is looked up in this order (first hit wins):
1. Explicit config file path (``--config`` on the command line)
2. .meshful.json in the mesh file's directory
3. .meshful.json in the current directory
4. ~/.meshful.json

Example .meshful.json:
{
    "stl": {
        "header": "Exported by ACME CAM",
        "strict": true
    },
    "obj": {
        "default_color": [0.5, 0.5, 0.5],
        "write_mtl": true
    },
    "logging": {
        "level": "DEBUG",
        "json_file": "meshful.log.json"
    }
}
"""

import json
import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".meshful.json"


@dataclass
class STLConfig:
    """Binary STL reading and writing."""
    header: str = "Exported by meshful"
    strict: bool = False  # reject non-finite coordinates on read


@dataclass
class OBJConfig:
    """OBJ/MTL writing."""
    default_color: List[float] = field(default_factory=lambda: [0.3, 0.3, 0.3])
    write_mtl: bool = True


@dataclass
class LoggingConfig:
    level: str = "INFO"
    json_file: Optional[str] = None
    use_colors: bool = True

    @property
    def level_number(self) -> int:
        value = logging.getLevelName(self.level.upper())
        return value if isinstance(value, int) else logging.INFO


_SECTIONS = {
    'stl': STLConfig,
    'obj': OBJConfig,
    'logging': LoggingConfig,
}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _matches_default(value: Any, default: Any) -> bool:
    """True if ``value`` can replace ``default`` in a config section."""
    if default is None:
        # Optional[str] fields (log file paths)
        return value is None or isinstance(value, str)
    if isinstance(default, bool):
        return isinstance(value, bool)
    if isinstance(default, list):
        return (isinstance(value, list) and len(value) == len(default)
                and all(_is_number(v) for v in value))
    return isinstance(value, type(default))


@dataclass
class ProjectConfig:
    """Complete project configuration."""
    stl: STLConfig = field(default_factory=STLConfig)
    obj: OBJConfig = field(default_factory=OBJConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def save(self, path: Union[str, Path]) -> None:
        path = Path(path)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(self.to_json())
        logger.info("Configuration saved to %s", path)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProjectConfig':
        """Create configuration from a dictionary.

        Unknown sections and keys (including ``_comment``) are ignored.
        Sections that are not objects and values whose type does not match
        the default are logged and left at their defaults.
        """
        config = cls()
        if not isinstance(data, dict):
            logger.warning("Configuration must be a JSON object, got %s; using defaults",
                           type(data).__name__)
            return config

        for name in _SECTIONS:
            values = data.get(name, {})
            if not isinstance(values, dict):
                logger.warning("Config section %r must be an object, got %s; ignored",
                               name, type(values).__name__)
                continue
            section = getattr(config, name)
            for key, value in values.items():
                if key.startswith('_') or not hasattr(section, key):
                    continue
                if _matches_default(value, getattr(section, key)):
                    setattr(section, key, value)
                else:
                    logger.warning("Config value %s.%s=%r has the wrong type; ignored",
                                   name, key, value)
        return config

    @classmethod
    def from_json(cls, json_str: str) -> 'ProjectConfig':
        return cls.from_dict(json.loads(json_str))

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'ProjectConfig':
        """Load configuration from a JSON file.

        Raises:
            FileNotFoundError: If file doesn't exist
            json.JSONDecodeError: If file is not valid JSON
        """
        path = Path(path)
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        logger.info("Configuration loaded from %s", path)
        return cls.from_dict(data)


def find_config_file(
    mesh_path: Optional[Union[str, Path]] = None,
    explicit_config: Optional[Union[str, Path]] = None,
) -> Optional[Path]:
    """Find the configuration file using the search order above."""
    if explicit_config:
        explicit = Path(explicit_config)
        if explicit.exists():
            return explicit
        logger.warning("Explicit config not found: %s", explicit)

    candidates = []
    if mesh_path:
        candidates.append(Path(mesh_path).parent / CONFIG_FILENAME)
    candidates.append(Path.cwd() / CONFIG_FILENAME)
    candidates.append(Path.home() / CONFIG_FILENAME)

    for candidate in candidates:
        if candidate.exists():
            return candidate
    return None


def load_config(
    mesh_path: Optional[Union[str, Path]] = None,
    explicit_config: Optional[Union[str, Path]] = None,
) -> ProjectConfig:
    """Load configuration, falling back to defaults when none is usable."""
    config_path = find_config_file(mesh_path, explicit_config)

    if config_path:
        try:
            return ProjectConfig.load(config_path)
        except (json.JSONDecodeError, OSError) as e:
            logger.error("Failed to load config %s: %s", config_path, e)

    return ProjectConfig()


def merge_configs(base: ProjectConfig, override: ProjectConfig) -> ProjectConfig:
    """Merge two configurations; non-default values in ``override`` win."""
    merged = ProjectConfig.from_dict(base.to_dict())

    for name, section_cls in _SECTIONS.items():
        defaults = section_cls()
        source = getattr(override, name)
        target = getattr(merged, name)
        for f in fields(section_cls):
            value = getattr(source, f.name)
            if value != getattr(defaults, f.name):
                setattr(target, f.name, value)

    return merged


def create_sample_config(path: Union[str, Path] = CONFIG_FILENAME) -> Path:
    """Write a sample configuration file with comments."""
    sample = {
        "_comment": "meshful configuration",
        "_version": "1.0",
        "stl": {
            "_comment": "Binary STL header text and strict float checking",
            **asdict(STLConfig()),
        },
        "obj": {
            "_comment": "Kd colour for triangles without a colour",
            **asdict(OBJConfig()),
        },
        "logging": {
            "_comment": "Level name and optional JSON-lines log file",
            **asdict(LoggingConfig()),
        },
    }

    path = Path(path)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(sample, f, indent=2, ensure_ascii=False)

    logger.info("Sample configuration created: %s", path)
    return path
