from vidhub.media.services.uploader import MediaUploader

__all__ = ["MediaUploader"]
