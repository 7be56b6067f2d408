"""s3lite: a small client for S3-compatible object stores."""

__version__ = "0.1.0"
