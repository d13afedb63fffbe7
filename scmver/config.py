"""
Configuration management for scmver.

Settings come from CLI arguments, environment variables (optionally loaded
from a .env file) and defaults, in that order of precedence.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv
from loguru import logger

# Load environment variables from .env file
load_dotenv()

OUTPUT_FORMATS = ('normalized', 'dotted')
VALID_LOG_LEVELS = ['DEBUG', 'VERBOSE', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


def get_config_value(cli_args, field_name: str, env_key: str, default, value_type: type = str):
    """
    Get configuration value with proper precedence: CLI args > env vars > defaults.

    Args:
        cli_args: CLI arguments object or None
        field_name: Name of the CLI argument field
        env_key: Environment variable key
        default: Default value if neither CLI nor env var is set
        value_type: str, or bool to interpret true/false style strings

    Returns:
        The configuration value, as a bool when value_type is bool
    """
    cli_value = getattr(cli_args, field_name, None) if cli_args else None
    if cli_value is not None:
        return cli_value

    env_value = os.environ.get(env_key, '')

    if value_type == bool:
        if env_value.strip().lower() in ('true', '1', 'yes'):
            return True
        elif env_value.strip().lower() in ('false', '0', 'no'):
            return False
        return default

    return env_value or default


def get_config_value_str(cli_args, field_name: str, env_key: str, default: str = '') -> str:
    """Get string configuration value."""
    return get_config_value(cli_args, field_name, env_key, default, str)


def get_config_value_bool(cli_args, field_name: str, env_key: str, default: bool = False) -> bool:
    """Get boolean configuration value."""
    return get_config_value(cli_args, field_name, env_key, default, bool)


@dataclass
class Config:
    """Settings for one scmver run."""

    # Where to look for the SCM root (None = current directory)
    path: Optional[str]

    # Version record to prefer over live detection (None = always detect)
    reference: Optional[str]

    # Where to write the result ('-' = stdout)
    output: str
    output_format: str

    # Rewrite the output file even if the version did not change
    force: bool

    log_level: str


def load_config(cli_args=None) -> Optional[Config]:
    """
    Load and validate configuration from CLI arguments and environment variables.

    Args:
        cli_args: Parsed CLI arguments or None

    Returns:
        Config: Validated configuration object, or None if validation failed
    """
    path = get_config_value_str(cli_args, 'path', 'SCMVER_PATH', '') or None
    reference = get_config_value_str(cli_args, 'reference', 'SCMVER_REFERENCE', '') or None
    output = get_config_value_str(cli_args, 'output', 'SCMVER_OUTPUT', '-') or '-'
    output_format = get_config_value_str(cli_args, 'output_format', 'SCMVER_FORMAT', 'normalized').lower()
    force = get_config_value_bool(cli_args, 'force', 'SCMVER_FORCE', False)
    log_level = get_config_value_str(cli_args, 'log_level', 'LOG_LEVEL', 'WARNING').upper()

    validation_errors = []

    if log_level not in VALID_LOG_LEVELS:
        validation_errors.append(f'LOG_LEVEL must be one of {VALID_LOG_LEVELS} (got: {log_level})')

    if output_format not in OUTPUT_FORMATS:
        validation_errors.append(f'SCMVER_FORMAT must be one of {list(OUTPUT_FORMATS)} (got: {output_format})')
    elif output_format == 'dotted' and output != '-':
        validation_errors.append('The dotted format is for display only and cannot be written to a file')

    if path and not os.path.exists(path):
        validation_errors.append(f'SCMVER_PATH ({path}) does not exist')

    if validation_errors:
        logger.error('❌ Configuration Error:')
        for i, error_msg in enumerate(validation_errors, 1):
            logger.error(f'   {i}. {error_msg}')
        return None

    config = Config(
        path=path,
        reference=reference,
        output=output,
        output_format=output_format,
        force=force,
        log_level=log_level,
    )

    logger.debug(f'SCMVER_PATH = {config.path}')
    logger.debug(f'SCMVER_REFERENCE = {config.reference}')
    logger.debug(f'SCMVER_OUTPUT = {config.output}')
    logger.debug(f'SCMVER_FORMAT = {config.output_format}')
    logger.debug(f'SCMVER_FORCE = {config.force}')

    return config
