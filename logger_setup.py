# logger_setup.py

import logging
import os

LOGGER_NAME = "flow_sim"


def setup_logging(config: dict, runs_dir: str = 'runs') -> logging.Logger:
    """
    Configures the dedicated "flow_sim" logger for a simulation run.

    Output goes to the console and to runs/<run_id>/simulation.log. The logger
    does not propagate to the root logger, so pygame's and Numba's chatter
    stays out of the run log.

    Data Contract:
    - Inputs:
        - config (dict): The parsed config file. Must contain 'run_id' and a
          'logging' dictionary with 'level' and 'format'.
        - runs_dir (str): Parent directory for per-run log directories.
    - Outputs: The configured logger.
    - Side Effects: Creates the run's log directory. Replaces any handlers a
      previous call installed.
    """
    run_id = config['run_id']
    log_config = config['logging']

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_config['level'])
    logger.propagate = False

    log_dir = os.path.join(runs_dir, run_id)
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, 'simulation.log')

    formatter = logging.Formatter(log_config['format'])
    file_handler = logging.FileHandler(log_file)
    file_handler.setFormatter(formatter)
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.addHandler(file_handler)
    logger.addHandler(stream_handler)

    logger.info(f"Logging initialized. Run ID: {run_id}. Log file: {log_file}")
    return logger
