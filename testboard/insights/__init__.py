from .badge import badge_color, coverage_badge_svg
from .repository import RepositoryInsightsRepository

__all__ = ['RepositoryInsightsRepository', 'badge_color', 'coverage_badge_svg']
