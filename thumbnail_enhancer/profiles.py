"""
Enhancement Profiles
Named bundles of pass toggles and strengths applied to a processing run
"""

from dataclasses import dataclass
from typing import Optional

from .color import check_factor
from .config import ENHANCEMENT_CONFIG
from .sharpen import KERNELS
from .variants import Tier

MODES = ('exclusive', 'tiered')


@dataclass(frozen=True)
class EnhancementProfile:
    """Which passes run, and how strongly"""
    name: str
    remove_border: bool = True
    resample: bool = True
    adjust_color: bool = True
    sharpen: bool = True
    brightness_factor: float = 1.0
    contrast_factor: float = 1.0
    saturation_factor: Optional[float] = None
    kernel: str = 'strong'
    # Pick brightness/contrast from image luminance instead of the fixed factors
    adaptive: bool = False

    def __post_init__(self):
        check_factor('brightness_factor', self.brightness_factor)
        check_factor('contrast_factor', self.contrast_factor)
        check_factor('saturation_factor', self.saturation_factor)
        if self.kernel not in KERNELS:
            raise ValueError(f"unknown kernel '{self.kernel}', expected one of {sorted(KERNELS)}")

    def passes(self) -> list:
        """Names of the passes this profile enables, in pipeline order"""
        return [name for name, enabled in (
            ('remove_border', self.remove_border),
            ('resample', self.resample),
            ('adjust_color', self.adjust_color),
            ('sharpen', self.sharpen),
        ) if enabled]

    def as_dict(self) -> dict:
        return {
            'name': self.name,
            'passes': self.passes(),
            'brightness_factor': self.brightness_factor,
            'contrast_factor': self.contrast_factor,
            'saturation_factor': self.saturation_factor,
            'kernel': self.kernel,
            'adaptive': self.adaptive,
        }


PRO = EnhancementProfile(
    name='pro',
    brightness_factor=1.1,
    contrast_factor=1.15,
    saturation_factor=1.2,
    kernel='strong',
)

# Clarity-preserving variant of PRO
GENTLE = EnhancementProfile(
    name='gentle',
    brightness_factor=1.05,
    contrast_factor=1.08,
    kernel='gentle',
)

# Brightness and contrast picked from luminance; no sharpening
ADAPTIVE = EnhancementProfile(
    name='adaptive',
    sharpen=False,
    adaptive=True,
)

# Border removal only
BASIC = EnhancementProfile(
    name='basic',
    resample=False,
    adjust_color=False,
    sharpen=False,
)

PLAIN = EnhancementProfile(
    name='plain',
    remove_border=False,
    resample=False,
    adjust_color=False,
    sharpen=False,
)

PROFILES = {profile.name: profile for profile in (PRO, GENTLE, ADAPTIVE, BASIC, PLAIN)}


def get_profile(name: str) -> EnhancementProfile:
    try:
        return PROFILES[name.lower()]
    except KeyError:
        raise ValueError(f"unknown profile '{name}', expected one of {sorted(PROFILES)}") from None


def select_profile(tier: Tier,
                   enhancement_enabled: Optional[bool] = None,
                   mode: Optional[str] = None,
                   profile: Optional[EnhancementProfile] = None) -> EnhancementProfile:
    """
    Choose the profile for a variant

    In 'exclusive' mode every variant of a run shares one profile: the run
    profile when enhancement is enabled, PLAIN otherwise. In 'tiered' mode Pro
    variants get the run profile and Standard variants only lose their black
    bars.

    Args:
        tier: Tier of the variant
        enhancement_enabled: Enhancement toggle (default: from env or True)
        mode: 'exclusive' or 'tiered' (default: from env or 'exclusive')
        profile: Run profile (default: from env or PRO)

    Returns:
        EnhancementProfile to apply
    """
    enabled = enhancement_enabled if enhancement_enabled is not None else ENHANCEMENT_CONFIG['enabled']
    mode = mode or ENHANCEMENT_CONFIG['mode']
    if mode not in MODES:
        raise ValueError(f"unknown enhancement mode '{mode}', expected one of {MODES}")
    profile = profile or get_profile(ENHANCEMENT_CONFIG['profile'])

    if not enabled:
        return PLAIN
    if mode == 'tiered' and Tier(tier) is not Tier.PRO:
        return BASIC
    return profile
