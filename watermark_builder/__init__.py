"""
Watermark Builder client package.

Client for a remote watermarking service: collects text or image watermark
parameters, sends them with a picture as multipart/form-data and returns the
rendered result.

Components:
- watermark_builder.api: Parameter model, multipart encoder, HTTP client
- watermark_builder.session: Request lifecycle and result export
- watermark_builder.infra: Settings and logging

Usage:
    python -m watermark_builder text --image photo.jpg --text "Hello" --output out.png
"""

__version__ = "1.0.0"
