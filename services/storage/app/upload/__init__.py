"""Direct-to-storage upload module."""

from services.storage.app.upload.uploader import (
    CompletionHandler,
    Uploader,
    build_form_fields,
)

__all__ = ["CompletionHandler", "Uploader", "build_form_fields"]
