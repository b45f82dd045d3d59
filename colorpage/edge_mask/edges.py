"""
Grayscale, color-control and edge-intensity transforms.

The edge transform outputs a luminance map where boundary pixels are
BRIGHT on a dark background. Mask building relies on that polarity.
"""

import cv2
import numpy as np


def to_grayscale(image: np.ndarray) -> np.ndarray:
    """
    Convert a cv2 image (grayscale, BGR or BGRA) to single-channel uint8.

    Args:
        image: Input image

    Returns:
        Grayscale image (H x W)
    """
    if image.ndim == 2:
        return image
    if image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)


def to_bgr(image: np.ndarray) -> np.ndarray:
    """Drop alpha / expand grayscale so downstream code sees 3 channels."""
    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    if image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2BGR)
    return image


def color_controls(
    image: np.ndarray,
    saturation: float = 1.0,
    contrast: float = 1.0,
    brightness: float = 0.0,
) -> np.ndarray:
    """
    Apply saturation, brightness and contrast adjustments.

    Values work on a 0.0-1.0 intensity scale: saturation lerps each pixel
    between its luma and its color, brightness is added, and contrast
    stretches around mid-gray.

    Args:
        image: Grayscale or BGR uint8 image
        saturation: 0.0 = grayscale, 1.0 = unchanged
        contrast: 1.0 = unchanged
        brightness: Offset added on the 0.0-1.0 scale

    Returns:
        Adjusted uint8 image with the same shape
    """
    out = image.astype(np.float32) / 255.0

    if out.ndim == 3 and saturation != 1.0:
        b, g, r = out[:, :, 0], out[:, :, 1], out[:, :, 2]
        luma = (0.2125 * r + 0.7154 * g + 0.0721 * b)[:, :, np.newaxis]
        out = luma + (out - luma) * saturation

    out = out + brightness
    out = (out - 0.5) * contrast + 0.5

    return np.clip(np.rint(out * 255.0), 0, 255).astype(np.uint8)


def edge_intensity(gray: np.ndarray, intensity: float = 2.6) -> np.ndarray:
    """
    Gradient-magnitude edge map with bright edges.

    A full black/white step produces 255 before the intensity gain;
    flat areas stay 0.

    Args:
        gray: Grayscale uint8 image
        intensity: Gain applied to the gradient magnitude

    Returns:
        uint8 edge map (H x W)
    """
    src = gray.astype(np.float32)
    gx = cv2.Sobel(src, cv2.CV_32F, 1, 0, ksize=3, borderType=cv2.BORDER_REPLICATE)
    gy = cv2.Sobel(src, cv2.CV_32F, 0, 1, ksize=3, borderType=cv2.BORDER_REPLICATE)
    magnitude = cv2.magnitude(gx, gy) / 4.0
    return np.clip(magnitude * intensity, 0, 255).astype(np.uint8)


def edge_map(
    image: np.ndarray,
    intensity: float = 2.6,
    gray_contrast: float = 1.15,
) -> np.ndarray:
    """
    Full photo -> bright-edge transform (grayscale, contrast, edges).

    Args:
        image: Grayscale, BGR or BGRA uint8 image
        intensity: Edge gain
        gray_contrast: Contrast applied to the grayscale image first

    Returns:
        3-channel BGR edge map (edges bright, background dark)
    """
    gray = color_controls(to_grayscale(image), contrast=gray_contrast)
    edges = edge_intensity(gray, intensity)
    return cv2.cvtColor(edges, cv2.COLOR_GRAY2BGR)


def luminance(image: np.ndarray) -> np.ndarray:
    """
    Integer luminance (30*R + 59*G + 11*B) / 100 per pixel.

    Args:
        image: Grayscale, BGR or BGRA uint8 image. BGRA color is
            premultiplied by alpha before weighting.

    Returns:
        uint8 luminance map (H x W)
    """
    if image.ndim == 2:
        return image.copy()

    channels = image.astype(np.uint32)
    if image.shape[2] == 4:
        alpha = channels[:, :, 3]
        channels = channels[:, :, :3] * alpha[:, :, np.newaxis] // 255

    b, g, r = channels[:, :, 0], channels[:, :, 1], channels[:, :, 2]
    return ((r * 30 + g * 59 + b * 11) // 100).astype(np.uint8)


def invert(image: np.ndarray) -> np.ndarray:
    return cv2.bitwise_not(image)


def multiply(top: np.ndarray, bottom: np.ndarray) -> np.ndarray:
    """Multiply-composite two same-shaped uint8 images."""
    product = top.astype(np.uint16) * bottom.astype(np.uint16)
    return ((product + 127) // 255).astype(np.uint8)
