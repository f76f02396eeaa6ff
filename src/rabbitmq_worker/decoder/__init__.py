"""Message body decoders."""

from .json_message_decoder import JSONMessageDecoder

__all__ = ["JSONMessageDecoder"]
