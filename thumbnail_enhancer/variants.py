"""
Variant Module
Descriptors for the resolution variants extracted from one source image
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple


class Tier(str, Enum):
    """Quality classification of an output variant"""
    STANDARD = 'standard'
    PRO = 'pro'


@dataclass(frozen=True)
class VariantSpec:
    """One requested output resolution"""
    label: str
    target_width: int
    target_height: int
    tier: Tier = Tier.STANDARD
    remove_border: bool = True
    # Which source rendition the variant is derived from, e.g. 'maxresdefault'
    source_key: str = 'maxresdefault'

    def __post_init__(self):
        if self.target_width <= 0 or self.target_height <= 0:
            raise ValueError(
                f"variant '{self.label}' needs a positive target size, "
                f"got {self.target_width}x{self.target_height}"
            )
        if not isinstance(self.tier, Tier):
            object.__setattr__(self, 'tier', Tier(self.tier))

    @property
    def target_size(self) -> Tuple[int, int]:
        return self.target_width, self.target_height

    @property
    def slug(self) -> str:
        """Filesystem-friendly form of the label"""
        return re.sub(r'[^a-z0-9]+', '_', self.label.lower()).strip('_')

    def as_dict(self) -> dict:
        return {
            'label': self.label,
            'target_width': self.target_width,
            'target_height': self.target_height,
            'tier': self.tier.value,
            'remove_border': self.remove_border,
            'source_key': self.source_key,
        }


DEFAULT_VARIANTS: List[VariantSpec] = [
    VariantSpec('8K Ultra Pro', 7680, 4320, Tier.PRO, source_key='maxresdefault'),
    VariantSpec('5K Pro', 5120, 2880, Tier.PRO, source_key='maxresdefault'),
    VariantSpec('4K Ultra HD', 3840, 2160, Tier.PRO, source_key='maxresdefault'),
    VariantSpec('2K QHD', 2560, 1440, source_key='maxresdefault'),
    VariantSpec('Full HD 1080p', 1920, 1080, source_key='maxresdefault'),
    VariantSpec('HD 720p', 1280, 720, source_key='hqdefault'),
    VariantSpec('SD 480p', 640, 480, source_key='sddefault'),
    VariantSpec('Standard 360p', 480, 360, source_key='hqdefault'),
    VariantSpec('Low 240p', 320, 240, source_key='mqdefault'),
    VariantSpec('Minimum 144p', 256, 144, source_key='default'),
]
