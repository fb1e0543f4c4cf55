"""
Preview images held by a diagram workflow.

A freshly rendered image is a transient preview: it is registered in a
PreviewRegistry and stays there until released. Previews hydrated from a
stored diagram reuse the record's data URI and own nothing.
"""
from typing import Optional

from visualgenie.services.render_client import RenderedImage
from visualgenie.utils.data_uri import decode_data_uri, encode_data_uri


class Preview:
    def __init__(
        self,
        uri: str,
        media_type: str,
        content: Optional[bytes] = None,
        registry: Optional["PreviewRegistry"] = None,
    ):
        self.uri = uri
        self.media_type = media_type
        self._content = content
        self._registry = registry
        self.released = False

    @property
    def transient(self) -> bool:
        return self._registry is not None

    @property
    def content(self) -> bytes:
        if self._content is None:
            self.media_type, self._content = decode_data_uri(self.uri)
        return self._content

    def data_uri(self) -> str:
        """Self-describing payload suitable for the imageData field."""
        if self.uri.startswith("data:"):
            return self.uri
        return encode_data_uri(self.content, self.media_type)

    def release(self) -> None:
        # Idempotent
        if self.released:
            return
        self.released = True
        if self._registry is not None:
            self._registry.discard(self)

    def __repr__(self) -> str:
        return f"<Preview {self.uri[:32]!r} transient={self.transient} released={self.released}>"


class PreviewRegistry:
    """Tracks live transient previews so leaks show up as a growing count."""

    def __init__(self):
        self._live: dict[str, Preview] = {}
        self._counter = 0

    def create(self, image: RenderedImage) -> Preview:
        self._counter += 1
        preview = Preview(
            uri=f"preview:{self._counter}",
            media_type=image.media_type,
            content=image.content,
            registry=self,
        )
        self._live[preview.uri] = preview
        return preview

    def hydrate(self, data_uri: str) -> Preview:
        media_type = data_uri[len("data:"):].split(";", 1)[0].split(",", 1)[0]
        return Preview(uri=data_uri, media_type=media_type or "application/octet-stream")

    def discard(self, preview: Preview) -> None:
        self._live.pop(preview.uri, None)

    @property
    def live_count(self) -> int:
        return len(self._live)
