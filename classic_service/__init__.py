"""
Classic background removal service package.

Removes flat backgrounds without a segmentation model: the background color
is estimated from the image border and pixels are keyed out by their color
distance to it. Exposes the pipeline primitives and the FastAPI application.
"""
