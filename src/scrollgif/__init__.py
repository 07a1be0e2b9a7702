"""
scrollgif
=========

Records a live, scrolled web page into an animated GIF.

This package provides the frame-capture -> scroll-choreography ->
streaming-encode -> post-compression pipeline. The browser itself is an
external collaborator: the pipeline drives any object implementing the
ExternalView protocol (a Playwright page adapter is included).

Components:
    - capture: Hold recorder, scroll choreographer, view protocol
    - stream: Pixel decoder, GIF stream encoder, chunk assembler
    - compression: gifsicle post-compression with retry/backoff
    - sink: Artifact storage
    - main: RecordingPipeline wiring everything together

Example:
    from scrollgif.main import record_page

    result = await record_page(page, "https://example.com")
    print(result.original_url)
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
