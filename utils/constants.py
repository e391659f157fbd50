#!/usr/bin/env python3

# BRIO Smart Tech (Smart 2.0) GATT layout; the command characteristic shares its service UUID
BRIO_CHAR_UUID = "b11b0002-bf9b-4a20-ba07-9218fec577d7"
BRIO_DEVICE_NAME = "Smart 2.0"

# Command frame markers
COMMAND_MARKER = {
    "SPEED": 0x01,
    "LIGHT": 0x02,
    "DIRECTION": 0x03,
    "EFFECT": 0x04,
}

# Notification frame markers
NOTIFICATION_MARKER = {
    "BATTERY": 0x10,
    "SPEED": 0x11,
    "BUMP": 0x12,
}

COMMAND_FRAME_LENGTH = 4  # marker + two argument bytes + checksum
NOTIFICATION_FRAME_LENGTH = 2  # marker + value

# Validation ranges
SPEED_MIN = 0
SPEED_MAX = 100
BATTERY_MAX = 100
EFFECT_ID_MAX = 0xFF
LIGHT_INTENSITY_MAX = 15
