"""
Background presets.

Each preset builds one pass chain from the live audio features and a
freshly drawn palette colour. Arguments computed directly are fixed
when the preset runs; lambdas are re-read every frame, so those stages
keep pulsing with the audio until the next rotation.
"""

import math

from versescope.core.scheduler import PassContext
from versescope.render.chain import PassChain, noise, osc, shape, voronoi


def voronoi_plate(ctx: PassContext) -> PassChain:
    """Voronoi plate with osc modulation and luma gating; bass and level driven."""
    r, g, b = ctx.pick_color().rgb
    return (
        voronoi(
            4 + 10 * ctx.bass(),  # cell density
            0.12 + 0.35 * ctx.level(),
            lambda: 5 + 40 * ctx.mid(),  # edge detail
        )
        .modulate(
            osc(2 + 10 * ctx.bass(), 0.04 + 0.18 * ctx.level(), 0.7),
            lambda: 0.08 + 0.45 * ctx.mid(),
        )
        .luma(lambda: 0.18 + 0.55 * ctx.level())
        .posterize(4)
        .contrast(1.6)
        .color(r, g, b)
        .pixelate(150, 270)
    )


def repeated_shape(ctx: PassContext) -> PassChain:
    """Repeated square with rotate wobble; mid drives rotation, level the threshold."""
    r, g, b = ctx.pick_color().rgb
    return (
        shape(
            4,
            lambda: 0.22 + 0.40 * ctx.bass(),
            lambda: 0.01 + 0.05 * ctx.level(),
        )
        .repeat(2 + math.floor(3 * ctx.bass()), 4)
        .rotate(lambda: 0.05 + 0.60 * ctx.mid())
        .modulate_rotate(
            noise(1.5 + 3.5 * ctx.mid(), 0.12 + 0.20 * ctx.level()),
            lambda: 0.05 + 0.55 * ctx.mid(),
        )
        .thresh(lambda: 0.22 + 0.55 * ctx.level())
        .posterize(4)
        .contrast(1.7)
        .color(r, g, b)
        .pixelate(170, 300)
    )


def noise_pump(ctx: PassContext) -> PassChain:
    """Noise base with osc modulation; level pumps brightness, bass drives motion."""
    r, g, b = ctx.pick_color().rgb
    return (
        noise(
            1.2 + 4.0 * ctx.bass(),
            lambda: 0.08 + 0.45 * ctx.level(),
        )
        .modulate(
            osc(5 + 18 * ctx.bass(), 0.03 + 0.16 * ctx.level(), 0.8),
            lambda: 0.06 + 0.40 * ctx.mid(),
        )
        .luma(lambda: 0.14 + 0.60 * ctx.level())
        .posterize(5)
        .contrast(1.55)
        .brightness(lambda: -0.25 + 0.55 * ctx.level())
        .color(r, g, b)
        .pixelate(150, 270)
    )


def kaleid_osc(ctx: PassContext) -> PassChain:
    """Kaleidoscopic osc with noise modulation and a level-driven gate."""
    r, g, b = ctx.pick_color().rgb
    return (
        osc(
            2 + 14 * ctx.bass(),
            0.02 + 0.20 * ctx.level(),
            0.65,
        )
        .kaleid(3 + math.floor(4 * ctx.bass()))
        .modulate(
            noise(1.0 + 4.0 * ctx.mid(), 0.10 + 0.25 * ctx.level()),
            lambda: 0.08 + 0.45 * ctx.mid(),
        )
        .thresh(lambda: 0.18 + 0.55 * ctx.level())
        .posterize(4)
        .contrast(1.65)
        .brightness(lambda: -0.22 + 0.50 * ctx.level())
        .color(r, g, b)
        .pixelate(170, 300)
    )


# The quieter passes read raw features, not gained ones


def plain_osc(ctx: PassContext) -> PassChain:
    r, g, b = ctx.pick_color().rgb
    return (
        osc(6, 0.02 + 0.06 * ctx.features.level, 0.8)
        .thresh(0.35)
        .posterize(4)
        .contrast(1.5)
        .color(r, g, b)
        .pixelate(180, 320)
    )


def plain_noise(ctx: PassContext) -> PassChain:
    r, g, b = ctx.pick_color().rgb
    return (
        noise(2, 0.12 + 0.25 * ctx.features.level)
        .luma(0.35)
        .posterize(4)
        .contrast(1.6)
        .color(r, g, b)
        .pixelate(160, 280)
    )


def plain_shape(ctx: PassContext) -> PassChain:
    r, g, b = ctx.pick_color().rgb
    return (
        shape(4, 0.38 + 0.10 * ctx.features.bass, 0.02)
        .repeat(3, 5)
        .thresh(0.33)
        .posterize(4)
        .contrast(1.65)
        .color(r, g, b)
        .pixelate(180, 320)
    )


def engraved_osc(ctx: PassContext) -> PassChain:
    """Engraved osc with noise modulation and threshold."""
    r, g, b = ctx.pick_color().rgb
    fv = ctx.features
    return (
        osc(10, 0.04 + 0.08 * fv.level, 0.9)
        .rotate(lambda: 0.03 + 0.12 * fv.bass)
        .modulate(noise(2, 0.25), lambda: 0.10 + 0.35 * fv.mid)
        .thresh(lambda: 0.40 + 0.20 * fv.level)
        .posterize(4)
        .contrast(1.45)
        .color(r, g, b)
        .pixelate(180, 320)
    )


PRESETS = (
    voronoi_plate,
    repeated_shape,
    noise_pump,
    kaleid_osc,
    plain_osc,
    plain_noise,
    plain_shape,
    engraved_osc,
)
