"""
phonescan/providers/adb_provider.py
Reads records from a USB-attached Android device via `adb shell content query`.
Assumes exactly one authorized device; selection and pairing happen outside.
"""

import logging
import subprocess
from typing import List

from phonescan.exceptions import ExecutionError
from phonescan.providers.base import QueryDescriptor, RawTextProvider

logger = logging.getLogger(__name__)


class AdbProvider(RawTextProvider):

    def __init__(self, adb_path: str = 'adb', timeout: int = 30):
        self.adb_path = adb_path
        self.timeout  = timeout

    def _run(self, args: List[str]) -> str:
        cmd = [self.adb_path, 'shell', *args]
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise ExecutionError(f"adb timed out after {self.timeout}s") from e
        except FileNotFoundError as e:
            raise ExecutionError(f"adb not found at {self.adb_path!r}") from e

        if result.returncode != 0:
            logger.error(f"Error executing command: {result.stderr.strip()}")
            raise ExecutionError(
                f"adb exited with {result.returncode}: {result.stderr.strip()}"
            )
        if result.stderr.strip():
            logger.error(f"Command had errors: {result.stderr.strip()}")
            raise ExecutionError(f"adb reported errors: {result.stderr.strip()}")
        return result.stdout

    def fetch(self, query: QueryDescriptor) -> str:
        return self._run(['content', 'query', '--uri', query.uri])

    def device_model(self) -> str:
        return self._run(['getprop', 'ro.product.model'])
