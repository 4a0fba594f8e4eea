from __future__ import annotations

from typing import Final

_BADGE_TEMPLATE: Final[str] = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="104" height="20" role="img" aria-label="coverage: {label}">'
    '<title>coverage: {label}</title>'
    '<rect width="61" height="20" fill="#555"/>'
    '<rect x="61" width="43" height="20" fill="{color}"/>'
    '<g fill="#fff" text-anchor="middle" font-family="Verdana,Geneva,DejaVu Sans,sans-serif" font-size="11">'
    '<text x="30.5" y="14">coverage</text>'
    '<text x="82.5" y="14">{label}</text>'
    '</g></svg>'
)

# (lower bound, color), highest first
_COLORS: Final[tuple[tuple[float, str], ...]] = (
    (90.0, '#4c1'),
    (75.0, '#a3c51c'),
    (60.0, '#dfb317'),
    (0.0, '#e05d44'),
)


def badge_color(percentage: float) -> str:
    for lower_bound, color in _COLORS:
        if percentage >= lower_bound:
            return color
    return _COLORS[-1][1]


def coverage_badge_svg(percentage: float) -> str:
    return _BADGE_TEMPLATE.format(label=f'{percentage:.0f}%', color=badge_color(percentage))
