"""Camera information data structure."""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CameraInfo:
    """
    Metadata for an enumerated RealSense device.

    Attributes:
        index: 1-based position in the SDK device list (matches the "#N" device id)
        serial_number: Device serial number as reported by the SDK
        name: Human-readable device name
        product_line: SDK product line (e.g. "D400", "SR300")
    """
    index: int
    serial_number: str
    name: str = "Intel RealSense"
    product_line: Optional[str] = None

    def __str__(self) -> str:
        """Return human-readable camera description."""
        return f"#{self.index}  {self.serial_number}"

    def matches(self, device_id: str) -> bool:
        """Check whether a command-line device id selects this camera."""
        if not device_id:
            return True
        if device_id.startswith("#"):
            return device_id[1:].isdigit() and int(device_id[1:]) == self.index
        return device_id == self.serial_number
