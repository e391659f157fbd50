#!/usr/bin/env python3
import asyncio
from typing import List, Optional

from bleak import BleakScanner

from config import get_settings
from utils.logging_config import get_logger

from .connection import DeviceHandle

logger = get_logger(__name__)


class TrainScanner:
    def __init__(self, name_filter: Optional[str] = None):
        self.name_filter = name_filter or get_settings().device_name_filter
        self._lock = asyncio.Lock()  # one scan at a time per adapter

    def _matches(self, name: Optional[str]) -> bool:
        return bool(name) and self.name_filter in name

    async def scan(self, timeout: Optional[float] = None) -> List[DeviceHandle]:
        """Scan once and return handles for every matching locomotive"""
        timeout = timeout if timeout is not None else get_settings().scan_timeout
        async with self._lock:
            logger.info(f"Scanning {timeout}s for devices named '{self.name_filter}'...")
            devices = await BleakScanner.discover(timeout=timeout)

        handles = []
        seen = set()
        for device in devices:
            if self._matches(device.name) and device.address not in seen:
                logger.info(f"Found locomotive: {device.name} ({device.address})")
                seen.add(device.address)
                handles.append(DeviceHandle(address=device.address, name=device.name))
        return handles

    async def find_first(self, timeout: Optional[float] = None) -> Optional[DeviceHandle]:
        """Return the first matching locomotive, or None when nothing answered"""
        handles = await self.scan(timeout)
        return handles[0] if handles else None
