from enum import Enum


class OrderStatus(str, Enum):
    pending = "pending"
    processing = "processing"
    shipped = "shipped"
    delivered = "delivered"
    cancelled = "cancelled"


# any status may be set from any other status
VALID_STATUSES = [s.value for s in OrderStatus]
