# -----------------------------------------------------------------------------
# Copyright 2025 Down Syndrome Education International and contributors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#   http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# -----------------------------------------------------------------------------

"""
Logging setup for model-building and sampling runs.

Library modules only create module-level loggers; call `setup_logging` from
a script or notebook to see their output.
"""

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    run_dir: str | Path | None = None,
    log_filename: str = "sampling.log",
    level: int = logging.INFO,
) -> logging.Logger:
    """
    Configure the `bayesmodels` logger to write to the console and optionally a file.

    Parameters
    ----------
    run_dir : str | Path, optional
        If given, logs are also written to `<run_dir>/<log_filename>`.
    log_filename : str
        Name of the log file within `run_dir`.
    level : int
        Logging level (default INFO).

    Returns
    -------
    logging.Logger
        The configured `bayesmodels` logger.
    """
    logger = logging.getLogger("bayesmodels")
    logger.setLevel(level)

    # replace handlers from earlier calls
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if run_dir is not None:
        run_path = Path(run_dir)
        run_path.mkdir(parents=True, exist_ok=True)
        log_file = run_path / log_filename

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

        logger.info(f"Logging to {log_file}")

    return logger
