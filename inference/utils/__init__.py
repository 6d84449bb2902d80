from .media import encode_image_base64, ensure_parent, has_extension, write_json

__all__ = ["encode_image_base64", "ensure_parent", "has_extension", "write_json"]
