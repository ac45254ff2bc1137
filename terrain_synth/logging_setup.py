# terrain_synth/logging_setup.py

import os
import json
import logging
import logging.config

DEFAULT_LOG_CONFIG_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'logging_config.json')


def setup_logging(config_path: str = None, level: str = None) -> logging.Logger:
    """
    Initializes the logging system from a JSON dictConfig file.

    Args:
        config_path (str, optional): Path to the JSON config. The bundled
            logging_config.json is used if None.
        level (str, optional): Overrides the level of every handler, e.g. "DEBUG".

    Returns:
        logging.Logger: The package logger.
    """
    config_path = config_path or DEFAULT_LOG_CONFIG_PATH
    with open(config_path, 'rt') as f:
        log_config = json.load(f)

    if level is not None:
        for handler in log_config.get('handlers', {}).values():
            handler['level'] = level.upper()

    logging.config.dictConfig(log_config)
    return logging.getLogger('terrain_synth')
