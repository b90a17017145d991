from __future__ import annotations

from plotly.colors import colorbrewer, sample_colorscale, unlabel_rgb

from .config import NEUTRAL_FILL, RANK_DOMAIN

# ColorBrewer RdYlGn, red (worst) -> green (best)
RDYLGN = colorbrewer.RdYlGn


def interpolate(t: float, colors: list[str] = RDYLGN) -> str:
    t = max(0.0, min(1.0, t))
    r, g, b = (int(v) for v in unlabel_rgb(sample_colorscale(colors, [t])[0]))
    return f"#{r:02x}{g:02x}{b:02x}"


def rank_color(rank: int | None, domain: tuple[int, int] = RANK_DOMAIN, neutral: str = NEUTRAL_FILL) -> str:
    """Rank 1 maps to the green end, ranks at or past ``domain[1]`` to red."""
    if rank is None:
        return neutral
    best, worst = domain
    span = (worst - best) or 1
    return interpolate(1.0 - (rank - best) / span)


def index_colorscale(colors: list[str]) -> list[list]:
    """Colorscale that paints ``z == i`` with ``colors[i]``."""
    if len(colors) < 2:
        c = colors[0] if colors else NEUTRAL_FILL
        return [[0.0, c], [1.0, c]]
    last = len(colors) - 1
    return [[i / last, c] for i, c in enumerate(colors)]
