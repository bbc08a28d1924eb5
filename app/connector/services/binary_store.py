from __future__ import annotations

"""Access to binary properties attached to the host's input items."""

from typing import Sequence

from app.connector.schemas.gladia_io import InputItem
from app.connector.services.errors import BinaryDataError


DEFAULT_FILENAME = "audio.wav"


class BinaryStore:
    def __init__(self, items: Sequence[InputItem]) -> None:
        self._items = items

    def get(self, index: int, property_name: str) -> tuple[bytes, str, str]:
        """Return (bytes, filename, mime type) for `property_name` of item `index`.

        Raises BinaryDataError if the item has no such binary property or the
        payload cannot be decoded.
        """

        binary = self._items[index].binary.get(property_name)
        if binary is None:
            raise BinaryDataError(
                f'This operation expects the node\'s input data to contain a binary file "{property_name}", but none was found',
                item_index=index,
            )
        try:
            data = binary.decode()
        except ValueError as exc:
            raise BinaryDataError(f'Binary property "{property_name}" is not valid base64', item_index=index) from exc
        return data, binary.file_name or DEFAULT_FILENAME, binary.mime_type
