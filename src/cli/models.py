"""Session settings collected by the CLI (flags or interactive menus) and handed to the services."""

from enum import IntEnum
from typing import Optional

from pydantic import BaseModel, field_validator

from src.core.exceptions import InvalidSettingsError
from src.core.shared_types import GameMode, Marker
from src.transport.serial_port import DEFAULT_READ_TIMEOUT

DEFAULT_RECEIVE_TIMEOUT = 30.0


class BaudRate(IntEnum):
    """Port speeds offered to the user."""

    BPS_300 = 300
    BPS_1200 = 1200
    BPS_2400 = 2400
    BPS_4800 = 4800
    BPS_9600 = 9600
    BPS_14400 = 14400
    BPS_19200 = 19200
    BPS_38400 = 38400
    BPS_57600 = 57600
    BPS_115200 = 115200
    BPS_128000 = 128000


# The short list shown in the game menu (the terminal tool offers all of BaudRate)
GAME_BAUD_RATES = (BaudRate.BPS_9600, BaudRate.BPS_115200, BaudRate.BPS_19200)


class SessionSettings(BaseModel):
    port: str
    baud_rate: BaudRate = BaudRate.BPS_9600
    first_player: Marker = Marker.X
    mode: GameMode = GameMode.MAN_VS_MAN
    receive_timeout: Optional[float] = DEFAULT_RECEIVE_TIMEOUT
    read_timeout: float = DEFAULT_READ_TIMEOUT
    journal_url: Optional[str] = None

    @field_validator("port")
    @classmethod
    def validate_port(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise InvalidSettingsError("Port name must not be empty.")
        return value

    @field_validator("receive_timeout")
    @classmethod
    def validate_receive_timeout(cls, value: Optional[float]) -> Optional[float]:
        # None: wait for the peer as long as it takes
        if value is not None and value <= 0:
            raise InvalidSettingsError(
                f"Receive timeout must be positive (or omitted), got {value}."
            )
        return value

    @field_validator("read_timeout")
    @classmethod
    def validate_read_timeout(cls, value: float) -> float:
        if value <= 0:
            raise InvalidSettingsError(f"Read timeout must be positive, got {value}.")
        return value
