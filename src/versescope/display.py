"""
pygame frame driver.

Renders the active background pass at the internal resolution, draws
the verse overlay on top (plate, accent border, hatching, shadowed
text, accent rule), and scales the result up to the window without
smoothing.
"""

import logging

import pygame

from versescope.config import InstallationConfig
from versescope.installation import Installation, RenderInstructions
from versescope.render.targets import FieldTarget

logger = logging.getLogger(__name__)

TEXT_COLOR = (245, 235, 220)
SHADOW_COLOR = (0, 0, 0)


def load_font(size: int) -> pygame.font.Font:
    """pygame's default font at the given pixel size."""
    if not pygame.font.get_init():
        pygame.font.init()
    return pygame.font.Font(None, size)


class FontMeasurer:
    """Width-measuring service backed by a pygame font."""

    def __init__(self, font: pygame.font.Font):
        self.font = font

    def __call__(self, text: str) -> float:
        return float(self.font.size(text)[0])


class OverlayPainter:
    """Draws the verse overlay for one frame."""

    def __init__(self, config: InstallationConfig, font: pygame.font.Font):
        self.cfg = config
        self.font = font
        self.size = (config.internal_width, config.internal_height)

    def _hatching(self, alpha: float) -> pygame.Surface:
        w, h = self.size
        layer = pygame.Surface(self.size, pygame.SRCALPHA)
        color = (255, 255, 255, int(255 * 0.08 * alpha))
        for y in range(74, h - 80, 6):
            pygame.draw.line(layer, color, (26, y), (w - 26, y - 2))
        return layer

    def paint(self, surface: pygame.Surface, instr: RenderInstructions):
        w, h = self.size
        ov = self.cfg.overlay
        accent = instr.accent.rgb255
        alpha = instr.alpha

        layer = pygame.Surface(self.size, pygame.SRCALPHA)

        # Plate behind the text, light enough to let the background through
        pygame.draw.rect(
            layer,
            (0, 0, 0, int(255 * instr.plate_alpha)),
            pygame.Rect(18, 64, w - 36, h - 128),
            border_radius=8,
        )
        pygame.draw.rect(layer, accent, pygame.Rect(14, 58, w - 28, h - 116), width=1, border_radius=10)
        layer.blit(self._hatching(alpha), (0, 0))

        for i, line in enumerate(instr.lines):
            if not line:
                continue
            y = ov.margin_y + i * ov.leading
            shadow = self.font.render(line, False, SHADOW_COLOR)
            shadow.set_alpha(int(255 * 0.85 * alpha))
            layer.blit(shadow, (ov.margin_x + 1, y + 1))
            text = self.font.render(line, False, TEXT_COLOR)
            text.set_alpha(int(255 * alpha))
            layer.blit(text, (ov.margin_x, y))

        pygame.draw.line(layer, accent, (ov.margin_x, h - 96), (w - ov.margin_x, h - 96), 2)

        jx, jy = instr.offset
        surface.blit(layer, (round(jx), round(jy)))


class PygameDisplay:
    """Window, clock and per-frame drawing."""

    def __init__(self, config: InstallationConfig, fullscreen: bool = False):
        self.cfg = config
        pygame.init()
        flags = pygame.FULLSCREEN if fullscreen else 0
        self.window = pygame.display.set_mode((config.target_width, config.target_height), flags)
        pygame.display.set_caption("versescope")

        self.canvas = pygame.Surface((config.internal_width, config.internal_height))
        self.font = load_font(config.overlay.text_size)
        self.measure = FontMeasurer(self.font)
        self.target = FieldTarget(config.internal_width, config.internal_height, config.synth_scale)
        self.painter = OverlayPainter(config, self.font)
        self.clock = pygame.time.Clock()

    def now_ms(self) -> float:
        return float(pygame.time.get_ticks())

    def draw(self, instr: RenderInstructions):
        frame = self.target.render(instr.time_ms / 1000.0)
        background = pygame.image.frombuffer(frame.tobytes(), (frame.shape[1], frame.shape[0]), "RGB")
        self.canvas.blit(background, (0, 0))
        self.painter.paint(self.canvas, instr)
        pygame.transform.scale(self.canvas, self.window.get_size(), self.window)
        pygame.display.flip()

    def run(self, installation: Installation, max_duration: float | None = None):
        """
        Drive the installation until the window closes, Escape is pressed,
        or max_duration seconds have passed.
        """
        start = self.now_ms()
        frames = 0
        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                    running = False

            now = self.now_ms()
            self.draw(installation.tick(now))
            frames += 1
            self.clock.tick(self.cfg.fps)

            if max_duration is not None and now - start >= max_duration * 1000.0:
                running = False

        elapsed = max(self.now_ms() - start, 1.0) / 1000.0
        logger.info("Stopped after %d frames (%.1f fps)", frames, frames / elapsed)

    def close(self):
        pygame.quit()
