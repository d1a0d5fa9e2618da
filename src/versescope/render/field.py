"""
Vectorized evaluation of pass chains.

Every pixel carries normalized (x, y) coordinates in [0, 1]. Coordinate
stages remap those coordinates (last stage first, so a trailing
pixelate quantizes the screen before anything else), the source is
sampled at the remapped coordinates, and colour stages are applied in
chain order. Colours are float RGBA stacks of shape (4, H, W).
"""

import numpy as np

from versescope.render.chain import PassChain, resolve

TAU = 2.0 * np.pi
LUMA_WEIGHTS = np.array([0.2125, 0.7154, 0.0721], dtype=np.float32)


def _fract(x: np.ndarray) -> np.ndarray:
    return x - np.floor(x)


def _smoothstep(edge0: float, edge1: float, x: np.ndarray) -> np.ndarray:
    span = edge1 - edge0
    if span == 0:
        return (x >= edge1).astype(np.float32)
    t = np.clip((x - edge0) / span, 0.0, 1.0)
    return t * t * (3.0 - 2.0 * t)


def _hash2(ix: np.ndarray, iy: np.ndarray, seed: float = 0.0) -> np.ndarray:
    """Deterministic pseudo-random value in [0, 1) per integer lattice point."""
    h = np.sin(ix * 127.1 + iy * 311.7 + seed * 74.7) * 43758.5453
    return _fract(h)


def _luminance(rgba: np.ndarray) -> np.ndarray:
    return np.tensordot(LUMA_WEIGHTS, rgba[:3], axes=1)


def _rgba(r, g, b, a=1.0) -> np.ndarray:
    shape = np.broadcast(r, g, b).shape
    out = np.empty((4,) + shape, dtype=np.float32)
    out[0], out[1], out[2], out[3] = r, g, b, a
    return out


def value_noise(x: np.ndarray, y: np.ndarray, z: float) -> np.ndarray:
    """Smooth 2D value noise, animated by interpolating between z slices."""
    z0 = np.floor(z)
    fz = z - z0
    fz = fz * fz * (3.0 - 2.0 * fz)

    def slice_at(seed: float) -> np.ndarray:
        ix, iy = np.floor(x), np.floor(y)
        fx, fy = x - ix, y - iy
        ux = fx * fx * (3.0 - 2.0 * fx)
        uy = fy * fy * (3.0 - 2.0 * fy)
        a = _hash2(ix, iy, seed)
        b = _hash2(ix + 1, iy, seed)
        c = _hash2(ix, iy + 1, seed)
        d = _hash2(ix + 1, iy + 1, seed)
        return (a + (b - a) * ux) + ((c + (d - c) * ux) - (a + (b - a) * ux)) * uy

    return slice_at(z0) * (1.0 - fz) + slice_at(z0 + 1.0) * fz


# Sources


def _osc(x, y, t, frequency=60.0, sync=0.1, offset=0.0):
    freq = frequency if frequency != 0 else 1e-6
    phase = x + t * sync
    r = np.sin((phase - offset / freq) * freq) * 0.5 + 0.5
    g = np.sin(phase * freq) * 0.5 + 0.5
    b = np.sin((phase + offset / freq) * freq) * 0.5 + 0.5
    return _rgba(r, g, b)


def _noise(x, y, t, scale=10.0, offset=0.1):
    n = value_noise(x * scale, y * scale, offset * t)
    return _rgba(n, n, n)


def _voronoi(x, y, t, scale=5.0, speed=0.3, blending=0.3):
    sx, sy = x * scale, y * scale
    ix, iy = np.floor(sx), np.floor(sy)
    fx, fy = sx - ix, sy - iy

    m_dist = np.full(x.shape, 10.0, dtype=np.float32)
    m_px = np.zeros(x.shape, dtype=np.float32)
    m_py = np.zeros(x.shape, dtype=np.float32)
    for ny in (-1.0, 0.0, 1.0):
        for nx in (-1.0, 0.0, 1.0):
            px = _hash2(ix + nx, iy + ny, 1.0)
            py = _hash2(ix + nx, iy + ny, 2.0)
            px = 0.5 + 0.5 * np.sin(t * speed + TAU * px)
            py = 0.5 + 0.5 * np.sin(t * speed + TAU * py)
            dist = np.hypot(nx + px - fx, ny + py - fy)
            closer = dist < m_dist
            m_dist = np.where(closer, dist, m_dist)
            m_px = np.where(closer, px, m_px)
            m_py = np.where(closer, py, m_py)

    v = (m_px * 0.3 + m_py * 0.6) * (1.0 - blending * m_dist)
    return _rgba(v, v, v)


def _shape(x, y, t, sides=3, radius=0.3, smoothing=0.01):
    sx, sy = x * 2.0 - 1.0, y * 2.0 - 1.0
    a = np.arctan2(sx, sy) + np.pi
    r = TAU / max(float(sides), 1e-6)
    d = np.cos(np.floor(0.5 + a / r) * r - a) * np.hypot(sx, sy)
    v = 1.0 - _smoothstep(radius, radius + smoothing + 1e-7, d)
    return _rgba(v, v, v)


def _solid(x, y, t, r=0.0, g=0.0, b=0.0, a=1.0):
    ones = np.ones(x.shape, dtype=np.float32)
    return _rgba(ones * r, ones * g, ones * b, ones * a)


SOURCE_FUNCS = {
    "osc": _osc,
    "noise": _noise,
    "voronoi": _voronoi,
    "shape": _shape,
    "solid": _solid,
}


# Coordinate stages


def _rotate_about_center(x, y, angle):
    cx, cy = x - 0.5, y - 0.5
    cos_a, sin_a = np.cos(angle), np.sin(angle)
    return cx * cos_a - cy * sin_a + 0.5, cx * sin_a + cy * cos_a + 0.5


def kaleid_fold(x: np.ndarray, y: np.ndarray, sides: float) -> tuple[np.ndarray, np.ndarray]:
    """
    Fold coordinates into one mirrored polar segment.

    Converts to polar around the center, folds theta into a single
    segment and reflects it, then converts back to Cartesian.
    """
    cx, cy = x - 0.5, y - 0.5
    r = np.hypot(cx, cy)
    theta = np.arctan2(cy, cx)

    segment_angle = TAU / max(float(sides), 1e-6)
    theta_folded = np.mod(theta, segment_angle)
    theta_folded = np.abs(theta_folded - segment_angle / 2.0)

    return r * np.cos(theta_folded), r * np.sin(theta_folded)


def _apply_coord(synth: "FieldSynth", op, x, y, t):
    args = [resolve(a) for a in op.args]
    name = op.name
    if name == "rotate":
        angle, speed = args
        return _rotate_about_center(x, y, angle + speed * t)
    if name == "repeat":
        rx, ry = args
        return _fract(x * rx), _fract(y * ry)
    if name == "kaleid":
        return kaleid_fold(x, y, args[0])
    if name == "modulate":
        texture, amount = args
        c = synth.evaluate_at(texture, x, y, t)
        return x + c[0] * amount, y + c[1] * amount
    if name == "modulate_rotate":
        texture, multiple = args
        c = synth.evaluate_at(texture, x, y, t)
        return _rotate_about_center(x, y, c[0] * multiple)
    if name == "pixelate":
        px, py = (max(float(v), 1.0) for v in args)
        return (np.floor(x * px) + 0.5) / px, (np.floor(y * py) + 0.5) / py
    raise ValueError(f"Unknown coordinate stage: {name}")


# Colour stages


def _apply_color(op, c: np.ndarray) -> np.ndarray:
    args = [resolve(a) for a in op.args]
    name = op.name
    if name == "thresh":
        threshold, tolerance = args
        v = _smoothstep(threshold - (tolerance + 1e-7), threshold + (tolerance - 1e-7), _luminance(c))
        return _rgba(v, v, v, c[3])
    if name == "luma":
        threshold, tolerance = args
        a = _smoothstep(threshold - (tolerance + 1e-7), threshold + (tolerance - 1e-7), _luminance(c))
        return _rgba(c[0] * a, c[1] * a, c[2] * a, a)
    if name == "posterize":
        bins, gamma = args
        gamma = max(float(gamma), 1e-6)
        rgb = np.power(np.clip(c[:3], 0.0, None), gamma)
        rgb = np.floor(rgb * bins) / max(float(bins), 1e-6)
        rgb = np.power(rgb, 1.0 / gamma)
        return _rgba(rgb[0], rgb[1], rgb[2], c[3])
    if name == "contrast":
        amount = args[0]
        rgb = (c[:3] - 0.5) * amount + 0.5
        return _rgba(rgb[0], rgb[1], rgb[2], c[3])
    if name == "brightness":
        amount = args[0]
        return _rgba(c[0] + amount, c[1] + amount, c[2] + amount, c[3])
    if name == "color":
        r, g, b = args
        return _rgba(c[0] * r, c[1] * g, c[2] * b, c[3])
    raise ValueError(f"Unknown colour stage: {name}")


class FieldSynth:
    """Evaluates pass chains on a fixed pixel grid."""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        xs = (np.arange(width, dtype=np.float32) + 0.5) / width
        ys = (np.arange(height, dtype=np.float32) + 0.5) / height
        self.x, self.y = np.meshgrid(xs, ys)

    def evaluate_at(self, chain: PassChain, x: np.ndarray, y: np.ndarray, time: float) -> np.ndarray:
        """Evaluate a chain at arbitrary coordinates; returns (4, H, W) RGBA."""
        for op in reversed(chain.stages):
            if op.is_coord:
                x, y = _apply_coord(self, op, x, y, time)

        source = chain.source
        c = SOURCE_FUNCS[source.name](x, y, time, *[resolve(a) for a in source.args])

        for op in chain.stages:
            if not op.is_coord:
                c = _apply_color(op, c)
        return c

    def evaluate(self, chain: PassChain, time: float) -> np.ndarray:
        return self.evaluate_at(chain, self.x, self.y, time)

    def render(self, chain: PassChain, time: float) -> np.ndarray:
        """
        Render a chain to an image.

        Args:
            chain: Pass to evaluate.
            time: Animation time in seconds.

        Returns:
            (H, W, 3) uint8 RGB array.
        """
        c = self.evaluate(chain, time)
        rgb = np.clip(c[:3], 0.0, 1.0)
        return (np.moveaxis(rgb, 0, -1) * 255).astype(np.uint8)
