"""Router utility helpers."""

from .request_utils import get_source_address, run_until_disconnect

__all__ = ["get_source_address", "run_until_disconnect"]
